"""
Parsers for environment-provided settings: comma-separated lists and .env files.
"""
import os
from typing import Dict, List, Optional

from dotenv import dotenv_values, load_dotenv


class EnvParser:
    """
    Parser for values handed to the step through the environment.
    """
    @staticmethod
    def parse_list(value: Optional[str]) -> List[str]:
        """
        Splits a comma-separated value, as CI systems pass list settings.
        Surrounding whitespace and empty items are dropped.

        Args:
            value (Optional[str]): Raw value, e.g. "v1, v2,latest".

        Returns:
            List[str]: The items in their original order.
        """
        if not value:
            return []
        return [item.strip() for item in value.split(",") if item.strip()]

    @staticmethod
    def parse(env_path: str) -> Dict[str, str]:
        """
        Parses a .env file without touching the process environment.

        Args:
            env_path (str): Path to the .env file.

        Returns:
            Dict[str, str]: Variables with a value.
        """
        if not os.path.exists(env_path):
            raise FileNotFoundError(env_path)
        return {k: v for k, v in dotenv_values(env_path).items() if v is not None}

    @staticmethod
    def load_env_file(env_path: str) -> Dict[str, str]:
        """
        Loads a .env file into the process environment. Variables that are
        already set keep their values.

        Returns:
            Dict[str, str]: The variables read from the file.
        """
        values = EnvParser.parse(env_path)
        load_dotenv(env_path, override=False)
        return values
