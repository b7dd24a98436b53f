"""uniaxial_hardening.output - 材料定義の出力."""

from uniaxial_hardening.output.report import (
    PrintFlag,
    export_json,
    format_material,
    format_material_json,
    material_to_dict,
    print_material,
)

__all__ = [
    "PrintFlag",
    "format_material",
    "format_material_json",
    "material_to_dict",
    "print_material",
    "export_json",
]
