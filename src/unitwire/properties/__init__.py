"""Property source layer — raw key/value layers with precedence lookup."""

from unitwire.properties.layers import PropertyLayer, PropertySourceStack
from unitwire.properties.loaders import build_standard_stack, load_properties_file
from unitwire.properties.names import canonical, comparison_key

__all__ = [
    "PropertyLayer",
    "PropertySourceStack",
    "build_standard_stack",
    "canonical",
    "comparison_key",
    "load_properties_file",
]
