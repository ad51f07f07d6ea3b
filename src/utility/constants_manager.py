
from dotenv import load_dotenv, find_dotenv
import os

class ConstantsManager:
    _dotenv_loaded = False

    def __init__(self):
        if not ConstantsManager._dotenv_loaded:
            load_dotenv(dotenv_path=find_dotenv(usecwd=True), override=False)
            ConstantsManager._dotenv_loaded = True

    def get_optional_variable(self, variableName, default):
        variable = os.environ.get(variableName, "")
        return variable if variable != "" else default

    def get_int_variable(self, variableName, default):
        variable = self.get_optional_variable(variableName, None)
        if variable is None:
            return default
        try:
            return int(variable)
        except ValueError:
            raise ValueError(f"{variableName} must be an integer, got {variable!r}")

    def get_min_dimension(self):
        return self.get_int_variable('LOWKEY_MIN_DIMENSION', 600)

    def get_output_dir(self):
        return self.get_optional_variable('LOWKEY_OUTPUT_DIR', './stego')

    def get_recovered_dir(self):
        return self.get_optional_variable('LOWKEY_RECOVERED_DIR', './stego_recovered')
