"""Read and write dbsplit.yaml with ruamel.yaml."""

from pathlib import Path
from typing import Union, cast

from ruamel.yaml import YAML

# Recursive type for nested YAML structures
ConfigValue = Union[str, int, float, bool, None, 'ConfigDict', list['ConfigValue']]
ConfigDict = dict[str, ConfigValue]

yaml = YAML()
yaml.default_flow_style = False


def load_yaml_file(file_path: Path) -> ConfigValue:
    """Load a YAML document; an empty file loads as an empty mapping.

    Raises:
        OSError: If the file cannot be read.
        ruamel.yaml.error.YAMLError: If the file is not valid YAML.
    """
    with file_path.open(encoding='utf-8') as f:
        raw = cast(ConfigValue, yaml.load(f))
    return {} if raw is None else raw


def save_yaml_file(data: ConfigDict, file_path: Path) -> None:
    """Write ``data`` as block-style YAML, creating parent folders."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open('w', encoding='utf-8') as f:
        yaml.dump(data, f)
