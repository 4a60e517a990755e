"""Import test modules so that their declarations register."""

import importlib.util
import logging
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from types import ModuleType

log = logging.getLogger(__name__)

TEST_FILE_PATTERNS = ("test_*.py", "*_test.py")


class DiscoveryError(Exception):
    """Raised when a test path does not exist or cannot be imported."""


def find_test_files(paths: Iterable[Path]) -> Sequence[Path]:
    """Expand directories into the test files they contain, recursively.

    Files given explicitly are kept whatever their name.

    Raises:
        DiscoveryError: If a path does not exist

    """
    found: list[Path] = []
    for path in paths:
        if path.is_dir():
            matches = {
                match for pattern in TEST_FILE_PATTERNS for match in path.rglob(pattern)
            }
            found.extend(sorted(matches))
        elif path.is_file():
            found.append(path)
        else:
            raise DiscoveryError(f"Test path not found: {path}")
    # keep the first occurrence of files named twice
    return list(dict.fromkeys(p.resolve() for p in found))


def _module_name(path: Path) -> str:
    name = path.stem
    suffix = 1
    while name in sys.modules:
        existing = getattr(sys.modules[name], "__file__", None)
        if existing is not None and Path(existing).resolve() == path:
            return name
        suffix += 1
        name = f"{path.stem}_{suffix}"
    return name


def import_test_file(path: Path) -> ModuleType:
    """Import one file as a module; importing the same file twice is a no-op.

    Raises:
        DiscoveryError: If the file cannot be loaded or raises while importing

    """
    path = path.resolve()
    name = _module_name(path)
    if name in sys.modules:
        return sys.modules[name]

    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise DiscoveryError(f"Cannot import test file: {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        del sys.modules[name]
        raise DiscoveryError(f"Failed to import {path}: {e}") from e
    log.debug("Imported test module %s from %s", name, path)
    return module


def load_test_modules(paths: Iterable[Path]) -> Sequence[ModuleType]:
    """Import every test file found under ``paths``.

    Args:
        paths: Files and directories; directories are searched for files
            named ``test_*.py`` or ``*_test.py``

    Returns:
        The imported modules, in import order

    Raises:
        DiscoveryError: If a path does not exist or a file fails to import

    """
    files = find_test_files(paths)
    log.info("Loading %d test file(s)", len(files))
    return [import_test_file(path) for path in files]
