"""HPXML to model translation."""

from .hpxml_to_model import HPXMLTranslator, ModelBuilder
from .output_vars import add_building_output_variables, write_mapping

__all__ = ["HPXMLTranslator", "ModelBuilder", "add_building_output_variables", "write_mapping"]
