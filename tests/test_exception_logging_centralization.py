from __future__ import annotations

import ast
from pathlib import Path

EXCEPTION_LOG_PATTERNS = (
    "logger.exception(",
    "LOGGER.exception(",
    "logging.exception(",
)
BROAD_EXCEPTION_IDENTIFIERS = {"Exception", "BaseException"}
SRC_ROOT = Path(__file__).resolve().parents[1] / "src"


def _iter_src_python_files() -> list[Path]:
    return sorted(SRC_ROOT.rglob("*.py"))


def test_exceptions_are_logged_through_log_exception() -> None:
    violations: list[str] = []

    for python_file in _iter_src_python_files():
        source = python_file.read_text(encoding="utf-8")
        relative_path = python_file.relative_to(SRC_ROOT).as_posix()
        violations.extend(
            f"{relative_path}: {pattern}"
            for pattern in EXCEPTION_LOG_PATTERNS
            if pattern in source
        )

    assert not violations, "\n".join(sorted(violations))


def test_no_bare_or_broad_exception_handlers_in_src() -> None:
    violations: list[str] = []

    for python_file in _iter_src_python_files():
        tree = ast.parse(python_file.read_text(encoding="utf-8"))
        relative_path = python_file.relative_to(SRC_ROOT).as_posix()
        for node in ast.walk(tree):
            if not isinstance(node, ast.Try):
                continue
            for handler in node.handlers:
                if handler.type is None:
                    violations.append(f"{relative_path}:{handler.lineno}: bare except")
                elif (
                    isinstance(handler.type, ast.Name)
                    and handler.type.id in BROAD_EXCEPTION_IDENTIFIERS
                ):
                    violations.append(
                        f"{relative_path}:{handler.lineno}: except {handler.type.id}",
                    )

    assert not violations, "\n".join(sorted(violations))
