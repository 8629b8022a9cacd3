"""
Import-boundary and purity enforcement.

1. Engine purity      -- dealflow_engines/** may not import config, YAML or
                         I/O libraries.
2. Engine no-impure   -- dealflow_engines/** may not read the wall clock or
                         the environment.
3. Kernel isolation   -- dealflow_kernel/** may not import engines or config.
4. Config entrypoint  -- only dealflow_config/** may import the loader.

All scanning is done via AST; these tests are read-only.
"""

import ast
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _python_files(package: str) -> list[Path]:
    """Return all .py files under *package*, sorted for deterministic order."""
    return sorted((REPO_ROOT / package).rglob("*.py"))


def _parse(filepath: Path) -> ast.AST:
    return ast.parse(filepath.read_text(), filename=str(filepath))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Return (line_number, module_string) for every import in *filepath*."""
    results: list[tuple[int, str]] = []
    for node in ast.walk(_parse(filepath)):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    """True if *module* equals or is a child of any prefix."""
    return any(module == p or module.startswith(f"{p}.") for p in prefixes)


def _extract_attribute_calls(filepath: Path) -> list[tuple[int, str]]:
    """Return (line_number, 'receiver.attr') for two-level attribute references."""
    results: list[tuple[int, str]] = []
    for node in ast.walk(_parse(filepath)):
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
            results.append((node.lineno, f"{node.value.id}.{node.attr}"))
    return results


def _relative(filepath: Path) -> str:
    return str(filepath.relative_to(REPO_ROOT))


# ---------------------------------------------------------------------------
# 1. TestEnginePurity
# ---------------------------------------------------------------------------

class TestEnginePurity:
    """dealflow_engines/** may not import config or I/O layers."""

    FORBIDDEN_PREFIXES = (
        "dealflow_config",
        "yaml",
        "os",
        "pathlib",
        "requests",
        "sqlite3",
        "socket",
    )

    def test_engine_files_exist(self):
        assert len(_python_files("dealflow_engines")) >= 9

    def test_engine_files_have_no_forbidden_imports(self):
        violations: list[str] = []

        for filepath in _python_files("dealflow_engines"):
            for lineno, module in _extract_imports(filepath):
                if _matches_any(module, self.FORBIDDEN_PREFIXES):
                    violations.append(f"  {_relative(filepath)}:{lineno} imports '{module}'")

        assert not violations, (
            "Engine purity violation, dealflow_engines/** must not import "
            "config or I/O modules:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 2. TestEngineNoImpureFunctions
# ---------------------------------------------------------------------------

class TestEngineNoImpureFunctions:
    """Engines receive the current day as ``as_of``; they never read it."""

    FORBIDDEN_CALLS = frozenset({
        "datetime.now",
        "datetime.utcnow",
        "datetime.today",
        "date.today",
        "time.time",
        "os.environ",
        "os.getenv",
    })

    def test_no_wall_clock_or_environment(self):
        violations: list[str] = []

        for filepath in _python_files("dealflow_engines"):
            for lineno, call in _extract_attribute_calls(filepath):
                if call in self.FORBIDDEN_CALLS:
                    violations.append(f"  {_relative(filepath)}:{lineno} uses '{call}'")

        assert not violations, (
            "Impure call in engines:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 3. TestKernelIsolation
# ---------------------------------------------------------------------------

class TestKernelIsolation:
    """dealflow_kernel/** sits at the bottom of the dependency graph."""

    FORBIDDEN_PREFIXES = ("dealflow_engines", "dealflow_config", "yaml")

    def test_kernel_has_no_upward_imports(self):
        violations: list[str] = []

        for filepath in _python_files("dealflow_kernel"):
            for lineno, module in _extract_imports(filepath):
                if _matches_any(module, self.FORBIDDEN_PREFIXES):
                    violations.append(f"  {_relative(filepath)}:{lineno} imports '{module}'")

        assert not violations, (
            "Kernel must not import engines or config:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# 4. TestConfigCentralisation
# ---------------------------------------------------------------------------

class TestConfigCentralisation:
    """Only dealflow_config/** may import the configuration loader."""

    def test_loader_only_imported_inside_config(self):
        violations: list[str] = []

        for package in ("dealflow_kernel", "dealflow_engines"):
            for filepath in _python_files(package):
                for lineno, module in _extract_imports(filepath):
                    if module == "dealflow_config.loader":
                        violations.append(f"  {_relative(filepath)}:{lineno}")

        assert not violations, (
            "dealflow_config.loader imported outside dealflow_config:\n"
            + "\n".join(violations)
        )
