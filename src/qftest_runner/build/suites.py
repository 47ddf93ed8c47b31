"""Suite declarations and their resolution to suite files."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from ..commandline.arguments import tokenize

SUITE_SEARCH_PATTERN = "**/*.qft"
RUNLOG_SEARCH_PATTERN = "**/*.qrz*"
SUITESFILE_PARAM = "-suitesfile"


@dataclass(frozen=True)
class SuiteDeclaration:
    """Which suite file(s) to run, plus custom QF-Test parameters.

    ``suitename`` is a .qft file, a directory containing suites, or a glob
    pattern, relative to the workspace (absolute paths work as well).
    """

    suitename: str
    custom_param: str = ""

    def __str__(self) -> str:
        return f"SUITE CONFIG with custom params: `{self.custom_param}' and suites: `{self.suitename}'"

    @property
    def has_suitesfile(self) -> bool:
        return SUITESFILE_PARAM in tokenize(self.custom_param)

    def consider_suitesfile(self) -> SuiteDeclaration:
        """Move ``-suitesfile`` to the end of the custom parameters.

        The file given after ``-suitesfile`` (or the suite name, if no value
        follows) becomes the suite name, so it gets resolved like any other
        suite and ends up directly behind the flag on the command line.
        """
        args = tokenize(self.custom_param)
        if SUITESFILE_PARAM not in args:
            return self

        idx = args.index(SUITESFILE_PARAM)
        del args[idx]
        if idx < len(args):
            suitesfile = args.pop(idx)
        else:
            suitesfile = self.suitename
        args.append(SUITESFILE_PARAM)

        return SuiteDeclaration(suitename=suitesfile, custom_param=" ".join(args))


class SuiteResolver:
    """Resolves a suite declaration to concrete files below a workspace."""

    def __init__(self, search_pattern: str = SUITE_SEARCH_PATTERN):
        """Initialize resolver.

        Args:
            search_pattern: Glob used when the suite name is a directory
        """
        self.search_pattern = search_pattern

    def resolve(self, workspace: Path, suite: SuiteDeclaration) -> Iterator[Path]:
        """Yield the files a suite declaration stands for.

        - existing file: the file itself
        - existing directory: all files matching ``search_pattern`` below it
        - anything else: ``suitename`` as a glob relative to the workspace

        Raises:
            OSError: the workspace or a directory can't be read
            ValueError: ``suitename`` is a glob pattern pathlib rejects
        """
        candidate = workspace / suite.suitename
        if candidate.exists():
            if candidate.is_dir():
                yield from sorted(p for p in candidate.glob(self.search_pattern) if p.is_file())
            else:
                yield candidate
        elif Path(suite.suitename).is_absolute():
            # Path.glob() takes relative patterns only
            anchor = Path(Path(suite.suitename).anchor)
            pattern = str(Path(suite.suitename).relative_to(anchor))
            yield from sorted(p for p in anchor.glob(pattern) if p.is_file())
        else:
            yield from sorted(p for p in workspace.glob(suite.suitename) if p.is_file())
