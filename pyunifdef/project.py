"""
Project driver

Resolves a whole source tree: every file listed in a manifest is resolved,
quoted #include references are followed, files that end up empty are
deleted, and tracked files that nothing reaches are removed.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from pyunifdef.errors import ResolverError
from pyunifdef.options import Settings
from pyunifdef.resolver import Resolver
from pyunifdef.symbols import Symbol

logger = logging.getLogger(__name__)

_OPTION_RE = re.compile(r"/\* @(.*?)@ ([\s\S]*?) \*/")
_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/|([^\\:]|^)//.*$", re.MULTILINE)
_INCLUDE_RE = re.compile(r'#include\s*?"(.*?)"')

DEFAULT_EXTENSIONS: Tuple[str, ...] = (".qc", ".h")


@dataclass
class ProjectOption:
    """An optional component announced in the project configuration"""
    name: str
    description: str


@dataclass
class ProjectResult:
    success: bool
    processed: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def discover_options(config_text: str) -> List[ProjectOption]:
    """Find ``/* @NAME@ description */`` blocks in a configuration file."""
    options: List[ProjectOption] = []
    for m in _OPTION_RE.finditer(config_text):
        options.append(ProjectOption(m.group(1), re.sub(r"\r?\n", " ", m.group(2))))
    return options


def symbols_from_decisions(decisions: Dict[str, Optional[bool]]) -> List[Symbol]:
    """True resolves an option as defined, False as undefined, None leaves it alone."""
    symbols: List[Symbol] = []
    for name, keep in decisions.items():
        if keep is True:
            symbols.append(Symbol(name, "1"))
        elif keep is False:
            symbols.append(Symbol(name, None))
    return symbols


def strip_comments(text: str) -> str:
    """Remove block and line comments. A // after a backslash or colon is kept."""
    return _COMMENT_RE.sub(lambda m: m.group(1) or "", text)


class ProjectResolver:
    def __init__(
        self,
        symbols: Iterable[Symbol],
        settings: Optional[Settings] = None,
        *,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        if settings is None:
            settings = Settings(compress_blanks=True, strict_logic=True)
        settings.validate()
        self.resolver = Resolver(settings, symbols)
        self.extensions = tuple(extensions)
        self.result = ProjectResult(success=True)

    def _fail(self, path: str, error: object) -> None:
        logger.warning("%s: %s", path, error)
        self.result.errors.append(f"{path}: {error}")
        self.result.success = False

    def _remove(self, path: str) -> None:
        os.remove(path)
        self.result.removed.append(path)

    def process_file(self, path: str, includes: Set[str], relative: Optional[str] = None) -> bool:
        """Resolve one file and the files it includes.

        Returns False when the file turned out empty and was deleted. A file
        that fails to resolve is reported and left untouched.
        """
        logger.info("Processing %s...", relative or path)
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                source = f.read()
        except OSError as e:
            self._fail(path, e)
            return True
        try:
            res = self.resolver.resolve(source)
        except ResolverError as e:
            self._fail(path, e)
            return True
        self.result.processed.append(path)

        stripped = strip_comments(res.text)
        if not stripped.strip():
            self._remove(path)
            return False

        base_dir = os.path.dirname(path)
        for m in _INCLUDE_RE.finditer(stripped):
            inc_path = os.path.normpath(os.path.join(base_dir, m.group(1)))
            if inc_path in includes:
                continue
            includes.add(inc_path)
            if os.path.isfile(inc_path):
                self.process_file(inc_path, includes, os.path.relpath(inc_path, base_dir))
            else:
                self._fail(inc_path, "included file not found")

        if res.altered:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(res.text)
        return True

    def process_manifest(self, manifest: str) -> ProjectResult:
        """Resolve every file a manifest lists, then prune what nothing reaches.

        The first manifest line names the build output and is kept as is.
        Pruning is skipped when any file failed.
        """
        manifest = os.path.abspath(manifest)
        base_dir = os.path.dirname(manifest)
        with open(manifest, "r", encoding="utf-8") as f:
            lines = re.split(r"\r?\n", f.read())

        includes: Set[str] = set()
        kept = lines[:1]
        for entry in lines[1:]:
            if not entry.strip():
                kept.append(entry)
                continue
            path = os.path.normpath(os.path.join(base_dir, entry))
            if path in includes:
                kept.append(entry)
                continue
            includes.add(path)
            if self.process_file(path, includes, entry):
                kept.append(entry)
            else:
                includes.discard(path)

        with open(manifest, "w", encoding="utf-8", newline="") as f:
            f.write(os.linesep.join(kept))

        if self.result.errors:
            # a failed file's includes are unknown
            logger.warning("Not pruning %s after %d error(s)", base_dir, len(self.result.errors))
        else:
            self.prune(base_dir, includes)
        return self.result

    def prune(self, directory: str, includes: Set[str]) -> None:
        """Delete tracked files not in ``includes``; drop directories left empty."""
        for entry in sorted(os.listdir(directory)):
            path = os.path.normpath(os.path.join(directory, entry))
            if os.path.isdir(path):
                if not entry.startswith("."):
                    self.prune(path, includes)
                continue
            if os.path.splitext(entry)[1] not in self.extensions:
                continue
            if path not in includes:
                logger.info("Removing unreferenced %s", path)
                self._remove(path)
        if not os.listdir(directory):
            os.rmdir(directory)
