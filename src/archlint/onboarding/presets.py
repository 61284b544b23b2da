"""Built-in architecture presets and generation of ``.archlint.yml`` from them.

A preset bundles required directories, directory import rules, test and
coverage policy, and the architectural guidance printed next to
violations. Generated configs keep the preset under ``preset`` and user
changes under ``overrides`` so :func:`refresh_config` can update the
former without touching the latter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from archlint.infrastructure.config import CONFIG_FILENAME, ConfigError, detect_module

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


@dataclass(frozen=True)
class Preset:
    """A predefined project layout with its rules and guidance texts."""

    name: str
    description: str
    required_directories: dict[str, str] = field(default_factory=dict)
    directories_import: dict[str, tuple[str, ...]] = field(default_factory=dict)
    coverage_threshold: float = 0.0
    package_thresholds: dict[str, float] = field(default_factory=dict)
    architectural_goals: str = ""
    principles: tuple[str, ...] = ()
    refactoring_guidance: str = ""
    coverage_guidance: str = ""

    def config_section(self) -> dict[str, Any]:
        """The ``preset`` section written to ``.archlint.yml``."""
        return {
            "name": self.name,
            "structure": {
                "required_directories": dict(self.required_directories),
                "allow_other_directories": True,
            },
            "rules": {
                "directories_import": {k: list(v) for k, v in self.directories_import.items()},
                "detect_unused": True,
                "shared_external_imports": {
                    "detect": True,
                    "mode": "warn",
                    "exclusions": list(COMMON_SHARED_EXCLUSIONS),
                    "exclusion_patterns": list(COMMON_SHARED_EXCLUSION_PATTERNS),
                },
                "test_files": {
                    "lint": True,
                    "location": "colocated",
                    "require_blackbox": True,
                },
                "test_coverage": {
                    "enabled": True,
                    "threshold": self.coverage_threshold,
                    "package_thresholds": dict(self.package_thresholds),
                },
            },
            "error_prompt": {
                "enabled": True,
                "architectural_goals": self.architectural_goals,
                "principles": list(self.principles),
                "refactoring_guidance": self.refactoring_guidance,
                "coverage_guidance": self.coverage_guidance,
                "blackbox_testing_guidance": BLACKBOX_TESTING_GUIDANCE,
            },
        }


# ---------------------------------------------------------------------------
# Shared settings
# ---------------------------------------------------------------------------

COMMON_SHARED_EXCLUSIONS: tuple[str, ...] = ("fmt", "strings", "errors", "time", "context")
COMMON_SHARED_EXCLUSION_PATTERNS: tuple[str, ...] = ("encoding/*",)

BLACKBOX_TESTING_GUIDANCE = """
**Why Blackbox Testing Matters:**

Blackbox tests (using 'package foo_test' instead of 'package foo') verify behavior
through the public API, making them more resilient to internal refactoring.

- Tests should verify behavior through the public interface, not internal details
- If you can't test adequately through the public API, the interface may need work
- When internals change, blackbox tests stay valid as long as the public contract holds

**How to convert to blackbox testing:**
1. Change package declaration from 'package foo' to 'package foo_test' in test files
2. Import your package: import "your-module/path/to/foo"
3. Test only through exported (capitalized) functions, types, and methods
"""

# ---------------------------------------------------------------------------
# Built-in presets
# ---------------------------------------------------------------------------

DDD = Preset(
    name="ddd",
    description="Domain-Driven Design with strict layering (domain -> app -> infra)",
    required_directories={
        "internal/domain": "Core business logic, entities, value objects, domain services",
        "internal/app": "Application services, use cases, orchestration",
        "internal/infra": "Infrastructure implementations (DB, external APIs, messaging)",
        "cmd": "Application entry points",
    },
    directories_import={
        "internal/domain": (),
        "internal/app": ("internal/domain",),
        "internal/infra": ("internal/domain",),
        "cmd": ("internal/app", "internal/infra"),
    },
    coverage_threshold=75,
    package_thresholds={
        "cmd": 40,
        "internal/domain": 90,
        "internal/app": 80,
        "internal/infra": 60,
    },
    architectural_goals="""
Domain-Driven Design (DDD) architecture aims to:
- Keep business logic pure and isolated in the domain layer
- Prevent infrastructure concerns from leaking into business logic
- Enable the domain model to evolve independently of technical implementation
- Make the business logic testable without external dependencies
""",
    principles=(
        "Domain layer has ZERO dependencies - it's the purest business logic",
        "Application layer orchestrates domain objects and use cases",
        "Infrastructure layer implements technical details (databases, APIs, messaging)",
        "Dependencies flow inward: cmd -> infra/app -> domain (never outward)",
        "Domain should never import from app or infra layers",
    ),
    refactoring_guidance="""
To refactor toward DDD compliance:

1. **Move business logic to domain layer**: pure rules, validation and domain services go to internal/domain
2. **Define domain interfaces in domain layer**: if domain needs repositories or messaging, define interfaces there and implement them in infra
3. **Use dependency injection**: pass infrastructure implementations to the application layer through constructors
4. **Extract use cases to app layer**: orchestration across domain objects belongs in internal/app
5. **Keep domain pure**: domain imports only the standard library

Example refactoring:
- Before: internal/domain/user.go imports internal/infra/database
- After: internal/domain/user.go defines UserRepository, internal/infra/postgres.go implements it
""",
    coverage_guidance="""
**Test Coverage Philosophy for DDD:**

- **internal/domain (90%)**: pure, side-effect-free logic; test every business rule
- **internal/app (80%)**: use cases and orchestration, with mocked domain and infra
- **internal/infra (60%)**: adapter logic; integration tests for critical paths
- **cmd (40%)**: flag parsing and wiring of the main workflows
""",
)

SIMPLE = Preset(
    name="simple",
    description="Basic Go project structure (cmd -> pkg -> internal)",
    required_directories={
        "cmd": "Application entry points",
        "pkg": "Public libraries and APIs",
        "internal": "Private application code",
    },
    directories_import={
        "cmd": ("pkg",),
        "pkg": ("internal",),
        "internal": (),
    },
    coverage_threshold=60,
    package_thresholds={"cmd": 30, "pkg": 60, "internal": 70},
    architectural_goals="""
Simple Go architecture aims to:
- Separate public APIs (pkg) from private implementation (internal)
- Keep command-line entry points minimal and focused
- Enable code reuse through public packages
- Protect internal implementation details from external use
""",
    principles=(
        "cmd contains only application entry points and CLI logic",
        "pkg contains public libraries that could be imported by other projects",
        "internal contains private code that cannot be imported externally",
        "Dependencies flow: cmd -> pkg -> internal",
        "internal packages should have zero dependencies on each other for maximum isolation",
    ),
    refactoring_guidance="""
To refactor toward simple architecture compliance:

1. **Consolidate entry points in cmd/**: main packages and CLI setup live in cmd/
2. **Extract reusable code to pkg/**: public APIs usable by other projects go in pkg/
3. **Move private implementation to internal/**: domain logic and utilities belong in internal/
4. **Break internal coupling**: define interfaces in the importing package and bridge
   internal packages with adapters in pkg/

Example refactoring:
- Before: internal/users/service.go imports internal/database directly
- After: internal/users defines UserRepository, pkg/app wires internal/database into it
""",
    coverage_guidance="""
**Test Coverage Philosophy for Simple Architecture:**

- **internal (70%)**: core logic and data structures, thoroughly unit tested
- **pkg (60%)**: public APIs that external consumers depend on
- **cmd (30%)**: flag parsing and end-to-end workflows
""",
)

HEXAGONAL = Preset(
    name="hexagonal",
    description="Ports & Adapters architecture (core -> ports -> adapters)",
    required_directories={
        "internal/core": "Business logic and domain models",
        "internal/ports": "Interface definitions (inbound/outbound)",
        "internal/adapters": "Concrete implementations of ports",
        "cmd": "Application entry points",
    },
    directories_import={
        "internal/core": (),
        "internal/ports": ("internal/core",),
        "internal/adapters": ("internal/ports", "internal/core"),
        "cmd": ("internal/ports", "internal/adapters"),
    },
    coverage_threshold=75,
    package_thresholds={
        "cmd": 40,
        "internal/core": 90,
        "internal/ports": 85,
        "internal/adapters": 60,
    },
    architectural_goals="""
Hexagonal (Ports & Adapters) architecture aims to:
- Isolate business logic (core) from external concerns (I/O, frameworks, databases)
- Define clear interfaces (ports) for all external interactions
- Enable easy testing by swapping real adapters with test doubles
- Support multiple adapters for the same port (e.g., REST and gRPC for same service)
""",
    principles=(
        "Core contains pure business logic with zero external dependencies",
        "Ports define interfaces for inbound requests and outbound dependencies",
        "Adapters implement ports using specific technologies (HTTP, gRPC, PostgreSQL, etc.)",
        "Dependencies point inward: cmd -> adapters -> ports -> core",
        "Core never imports ports or adapters (dependency inversion)",
    ),
    refactoring_guidance="""
To refactor toward hexagonal architecture compliance:

1. **Extract business logic to core/**: domain logic and core types go in internal/core
2. **Define port interfaces in ports/**: inbound (UserService) and outbound (UserRepository)
3. **Implement adapters in adapters/**: HTTP handlers, database clients, queue producers
4. **Wire dependencies in cmd/**: build concrete adapters and inject them through ports

Example refactoring:
- Before: internal/core/user_service.go imports a database package directly
- After: internal/ports/user_repository.go defines UserRepository,
  internal/adapters/postgres/user_repo.go implements it, cmd/main.go wires them
""",
    coverage_guidance="""
**Test Coverage Philosophy for Hexagonal Architecture:**

- **internal/core (90%)**: business rules tested without any adapters
- **internal/ports (85%)**: interface contracts exercised with mock implementations
- **internal/adapters (60%)**: translation between ports and external systems
- **cmd (40%)**: dependency wiring and startup
""",
)

PRESETS: dict[str, Preset] = {p.name: p for p in (DDD, SIMPLE, HEXAGONAL)}


def get_preset(name: str) -> Preset:
    """Return the preset called *name*. Raises ``ValueError`` if unknown."""
    preset = PRESETS.get(name)
    if preset is None:
        msg = f"Unknown preset '{name}', available: {', '.join(sorted(PRESETS))}"
        raise ValueError(msg)
    return preset


# ---------------------------------------------------------------------------
# Config file generation
# ---------------------------------------------------------------------------

DEFAULT_CONFIG_TEXT = """\
# archlint configuration
#
# Strict 3-layer architecture:
# - cmd: entry points, can only import from pkg
# - pkg: public APIs and orchestration, can import from internal
# - internal: isolated packages that cannot import each other

rules:
  directories_import:
    cmd: [pkg]
    pkg: [internal]
    internal: []

  # packages not transitively imported from cmd/
  detect_unused: true
"""

_EXAMPLE_OVERRIDES = """
# Example overrides:
#overrides:
#  structure:
#    required_directories:
#      scripts: "Build and deployment scripts"
#  rules:
#    directories_import:
#      scripts: ["pkg"]
#  error_prompt:
#    architectural_goals: |
#      Custom goals for your project...
"""


class _BlockDumper(yaml.SafeDumper):
    """Safe dumper writing multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    style = "|" if "\n" in value else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", value, style=style)


_BlockDumper.add_representer(str, _represent_str)


def _dump(data: dict[str, Any]) -> str:
    return yaml.dump(data, Dumper=_BlockDumper, sort_keys=False, allow_unicode=True, width=100)


def render_preset_config(
    preset: Preset, module: str, overrides: dict[str, Any] | None = None
) -> str:
    """YAML document for a preset-based config, without the header comment."""
    data: dict[str, Any] = {"module": module, "preset": preset.config_section()}
    if overrides:
        data["overrides"] = overrides
    text = _dump(data)
    if not overrides:
        text += _EXAMPLE_OVERRIDES
    return text


def create_default_config(project_root: Path) -> Path:
    """Write the plain cmd/pkg/internal config. Refuses to overwrite."""
    path = project_root / CONFIG_FILENAME
    if path.exists():
        msg = f"{CONFIG_FILENAME} already exists, refusing to overwrite"
        raise ConfigError(msg)
    path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")
    logger.info("Created %s", path)
    return path


def create_config_from_preset(
    project_root: Path, name: str, *, create_dirs: bool = False
) -> Path:
    """Write ``.archlint.yml`` for preset *name*, optionally creating its directories.

    Raises ``ValueError`` for an unknown preset and :class:`ConfigError` if
    the config already exists or the module cannot be detected.
    """
    preset = get_preset(name)
    path = project_root / CONFIG_FILENAME
    if path.exists():
        msg = f"{CONFIG_FILENAME} already exists, refusing to overwrite"
        raise ConfigError(msg)

    module = detect_module(project_root)
    header = (
        f"# Auto-generated by archlint init --preset={name}\n"
        "#\n"
        "# preset: full preset configuration, rewritten by 'archlint refresh'\n"
        "# overrides: your custom settings, preserved by 'archlint refresh'\n"
        "#\n\n"
    )
    path.write_text(header + render_preset_config(preset, module), encoding="utf-8")

    if create_dirs:
        for dir_path in preset.required_directories:
            (project_root / dir_path).mkdir(parents=True, exist_ok=True)
            logger.info("Created directory %s", dir_path)

    return path


def refresh_config(project_root: Path, name: str | None = None) -> str:
    """Rewrite the ``preset`` section with the current preset, keeping ``overrides``.

    The previous file is saved next to it with a ``.backup`` suffix.
    Returns the name of the preset applied.
    """
    path = project_root / CONFIG_FILENAME
    if not path.is_file():
        msg = f"{CONFIG_FILENAME} not found, run 'archlint init' first"
        raise ConfigError(msg)

    original = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(original) or {}
    except yaml.YAMLError as exc:
        msg = f"{CONFIG_FILENAME}: invalid YAML ({exc})"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{CONFIG_FILENAME} must be a YAML mapping"
        raise ConfigError(msg)

    if name is None:
        section = data.get("preset")
        name = section.get("name") if isinstance(section, dict) else None
        if not name:
            msg = (
                "Config was not created from a preset, cannot refresh. "
                "Use --preset to choose one"
            )
            raise ConfigError(msg)

    preset = get_preset(str(name))
    overrides = data.get("overrides")
    if overrides is not None and not isinstance(overrides, dict):
        msg = f"{CONFIG_FILENAME}: 'overrides' must be a mapping"
        raise ConfigError(msg)

    backup = path.with_name(path.name + BACKUP_SUFFIX)
    backup.write_text(original, encoding="utf-8")

    module = data.get("module") or detect_module(project_root)
    header = (
        f"# Refreshed by archlint refresh with preset={preset.name}\n"
        f"# Previous config backed up to {backup.name}\n"
        "#\n\n"
    )
    path.write_text(
        header + render_preset_config(preset, str(module), overrides or None),
        encoding="utf-8",
    )
    logger.info("Refreshed %s with preset %s", path, preset.name)
    return preset.name
