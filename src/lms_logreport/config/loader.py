"""
YAML configuration loader.

Reads plain YAML files directly and SOPS-encrypted files (``*.enc.yaml``)
through the ``sops`` binary.
"""

import subprocess
from pathlib import Path
from typing import Any

import yaml


def is_sops_file(file_path: Path) -> bool:
    """Return True if the file name marks it as SOPS-encrypted."""
    return file_path.name.endswith((".enc.yaml", ".enc.yml"))


def decrypt_sops_file(file_path: Path) -> Any:
    """
    Decrypt a SOPS-encrypted YAML file with the `sops` binary and parse it.

    Raises:
        FileNotFoundError: If the file is missing
        RuntimeError: If `sops` is not installed or cannot decrypt the file
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Encrypted config file not found: {file_path}")

    command = ["sops", "--decrypt", str(file_path)]
    try:
        completed = subprocess.run(command, capture_output=True, text=True, check=True)
    except FileNotFoundError as e:
        raise RuntimeError(
            "sops binary not found on PATH; see https://github.com/getsops/sops"
        ) from e
    except subprocess.CalledProcessError as e:
        raise RuntimeError(
            f"Could not decrypt {file_path.name}: {e.stderr.strip()}"
        ) from e

    try:
        return yaml.safe_load(completed.stdout) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Decrypted {file_path.name} is not valid YAML: {e}") from e


def load_config_file(file_path: Path) -> dict[str, Any]:
    """
    Load a configuration mapping from a YAML file.

    Args:
        file_path: Path to a plain or SOPS-encrypted YAML file

    Returns:
        Configuration dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If file doesn't exist
        RuntimeError: If SOPS decryption fails
        ValueError: If the file is not valid YAML or not a mapping
    """
    if is_sops_file(file_path):
        config = decrypt_sops_file(file_path)
    else:
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {file_path}")
        try:
            config = yaml.safe_load(file_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {file_path}: {e}") from e

    if not isinstance(config, dict):
        raise ValueError(
            f"Config file {file_path} must contain a mapping, "
            f"got {type(config).__name__}"
        )
    return config
