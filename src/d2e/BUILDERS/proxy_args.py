# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Injection of proxy settings from the environment into build arguments.
"""
import os
from typing import Dict, Iterable, List, Mapping, Optional

PROXY_KEYS = ("http_proxy", "https_proxy", "no_proxy")


class ProxyArgumentAugmenter:
    """
    Adds `key=value` build arguments for environment values the caller did not
    already set explicitly.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        :param environ: Environment snapshot. Defaults to a copy of the process environment.
        """
        self.environ: Dict[str, str] = dict(os.environ if environ is None else environ)

    def value(self, key: str) -> str:
        """
        Looks up the key as given first, then its upper-case form.
        Both forms are assumed to carry the same value.
        """
        value = self.environ.get(key, "")
        if value:
            return value
        return self.environ.get(key.upper(), "")

    @staticmethod
    def has_argument(args: Iterable[str], key: str) -> bool:
        """Checks whether any argument starts with either case of `key`."""
        upper = key.upper()
        return any(arg.startswith(key) or arg.startswith(upper) for arg in args)

    def augment(self, args: List[str], keys: Iterable[str] = PROXY_KEYS) -> List[str]:
        """
        Returns a new argument list with both the given and the upper-case
        `key=value` pairs appended for every key set in the environment.

        :param args: Explicit build arguments.
        :param keys: Environment keys to consider.
        """
        result = list(args)
        for key in keys:
            value = self.value(key)
            if value and not self.has_argument(result, key):
                result.append(f"{key}={value}")
                result.append(f"{key.upper()}={value}")
        return result
