"""Reading and writing orthokit objects."""

from orthokit.io.serialization import load_json, read_dict, register_type, save_json, write_dict

__all__ = [
    "load_json",
    "read_dict",
    "register_type",
    "save_json",
    "write_dict",
]
