"""Build environment and placeholder expansion."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass

# $NAME, ${NAME} or $$ (literal dollar)
_VARIABLE = re.compile(r"\$([A-Za-z0-9_]+|\{[A-Za-z0-9_.]+\}|\$)")


class EnvironmentExpander:
    """Expands $NAME and ${NAME} placeholders from a variable mapping.

    Unknown names are left untouched; ``$$`` becomes a single ``$``.
    Not os.path.expandvars: values come from the build environment passed
    to QF-Test (JOB_NAME, BUILD_NUMBER set by BuildContext), not from
    this process's os.environ.
    """

    def __init__(self, env: Mapping[str, str]):
        self.env = env

    def expand(self, text: str) -> str:
        def _replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name == "$":
                return "$"
            if name.startswith("{"):
                name = name[1:-1]
            value = self.env.get(name)
            return match.group(0) if value is None else value

        return _VARIABLE.sub(_replace, text)


@dataclass
class BuildContext:
    """Identity of the running build, as provided by the CI."""

    workspace: str
    job_name: str = "job"
    build_number: str = "0"
    windows: bool = False

    def environment(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Environment passed to QF-Test and used for placeholder expansion.

        Starts from ``base`` (default: os.environ) and sets WORKSPACE,
        JOB_NAME and BUILD_NUMBER to this build's values.
        """
        env = dict(os.environ if base is None else base)
        env["WORKSPACE"] = str(self.workspace)
        env["JOB_NAME"] = self.job_name
        env["BUILD_NUMBER"] = self.build_number
        return env
