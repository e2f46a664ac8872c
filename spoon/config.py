"""
Spoon configuration.

Settings come from the environment, optionally seeded from a `.env` file:

    SPOON_OUTPUT_DIR        directory compiled files are written to (default ".")
    SPOON_OUTPUT_EXTENSION  extension of compiled files (default ".hx")
    SPOON_LOG_LEVEL         logging level name for the command line (default "INFO")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv


@dataclass
class SpoonConfig:
    output_dir: str = "."
    extension: str = ".hx"
    log_level: str = "INFO"


def load_config(env_file: Optional[Union[str, Path]] = None) -> SpoonConfig:
    """
    Build the configuration from the environment.

    Variables already set in the environment win over values in the `.env` file.

    Args:
        env_file: Explicit `.env` path; when omitted, the nearest `.env` above the
            working directory is used if there is one

    Returns:
        SpoonConfig
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv(find_dotenv(usecwd=True))

    extension = os.getenv("SPOON_OUTPUT_EXTENSION", ".hx")
    if extension and not extension.startswith("."):
        extension = "." + extension

    return SpoonConfig(
        output_dir=os.getenv("SPOON_OUTPUT_DIR", "."),
        extension=extension,
        log_level=os.getenv("SPOON_LOG_LEVEL", "INFO").upper(),
    )
