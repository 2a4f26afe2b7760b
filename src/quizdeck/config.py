"""Configuration loader for quizdeck sessions."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping

from quizdeck.feedback import FALLBACK_RATIONALE
from quizdeck.selector import DEFAULT_QUIZ_ORDER

CONFIG_FILENAME = "quizdeck.toml"
CONFIG_ENV = "QUIZDECK_CONFIG"
HOME_ENV = "QUIZDECK_HOME"
ENV_PREFIX = "QUIZDECK_"

_DEFAULT_LOG_LEVEL = "INFO"
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

_ORDER_LITERAL = ", ".join(f'"{quiz_id}"' for quiz_id in DEFAULT_QUIZ_ORDER)

CONFIG_TEMPLATE = f"""\
# quizdeck configuration

[bank]
# JSON question bank; leave empty to use the bundled sample bank.
path = ""

[quizzes]
# Quiz slots offered in the picker, in display order.
order = [{_ORDER_LITERAL}]
# Quiz opened at start; empty picks the first available slot.
default = ""

[feedback]
fallback = "{FALLBACK_RATIONALE}"

[logging]
level = "{_DEFAULT_LOG_LEVEL}"
verbose = false
# Directory for JSON log files; empty uses $QUIZDECK_HOME/logs.
dir = ""
"""


class QuizdeckConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizdeckConfig:
    """Fully resolved settings for a quizdeck run."""

    bank_path: Path | None
    quiz_order: tuple[str, ...]
    default_quiz: str | None
    fallback: str
    log_level: str
    verbose: bool
    log_dir: Path


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of env and file options."""

    bank_path: Path | None = None
    log_level: str | None = None
    verbose: bool | None = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizdeckConfig
    config_path: Path | None


def default_home(env: Mapping[str, str] | None = None) -> Path:
    env_map = os.environ if env is None else env
    raw = (env_map.get(HOME_ENV) or "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".quizdeck"


def load_config(
    *,
    config_path: Path | None = None,
    overrides: ConfigOverrides | None = None,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    requested, explicit = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        cwd=cwd or Path.cwd(),
    )

    options = _default_table()
    loaded_path: Path | None = None
    if requested.exists():
        _apply_file(options, _read_file(requested))
        loaded_path = requested
    elif explicit:
        raise QuizdeckConfigError(f"Config file not found: {requested}")

    bank_path = _pick_first(
        overrides.bank_path,
        _parse_env_path(env_map, "BANK"),
        _coerce_optional_path(options["bank"]["path"], field="bank.path"),
    )
    log_dir = _pick_first(
        _parse_env_path(env_map, "LOG_DIR"),
        _coerce_optional_path(options["logging"]["dir"], field="logging.dir"),
    )

    config = QuizdeckConfig(
        bank_path=bank_path,
        quiz_order=_normalize_order(options["quizzes"]["order"]),
        default_quiz=_optional_string(
            options["quizzes"]["default"], field="quizzes.default"
        ),
        fallback=_require_string(
            options["feedback"]["fallback"], field="feedback.fallback"
        ),
        log_level=_resolve_log_level(
            _pick_first(
                overrides.log_level,
                _parse_env_string(env_map, "LOG_LEVEL"),
                options["logging"]["level"],
            )
        ),
        verbose=_resolve_verbose(
            overrides.verbose, options["logging"]["verbose"]
        ),
        log_dir=log_dir or default_home(env_map) / "logs",
    )
    return LoadResult(config=config, config_path=loaded_path)


def write_config_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write the commented starter config, creating parent folders."""

    if path.exists() and not overwrite:
        raise QuizdeckConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    return path


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "bank": {"path": ""},
        "quizzes": {"order": list(DEFAULT_QUIZ_ORDER), "default": ""},
        "feedback": {"fallback": FALLBACK_RATIONALE},
        "logging": {
            "level": _DEFAULT_LOG_LEVEL,
            "verbose": False,
            "dir": "",
        },
    }


def _read_file(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except OSError as exc:
        raise QuizdeckConfigError(f"Unable to read config {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise QuizdeckConfigError(f"Failed to parse {path}: {exc}") from exc


def _apply_file(
    options: MutableMapping[str, MutableMapping[str, Any]],
    parsed: Mapping[str, Any],
) -> None:
    # Every section is a flat table; anything outside the defaults is a typo.
    for section, values in parsed.items():
        table = options.get(section)
        if table is None:
            raise QuizdeckConfigError(f"Unknown configuration key '{section}'.")
        if not isinstance(values, Mapping):
            raise QuizdeckConfigError(
                f"Expected table for '{section}', found "
                f"{type(values).__name__}."
            )
        for key, value in values.items():
            if key not in table:
                raise QuizdeckConfigError(
                    f"Unknown configuration key '{section}.{key}'."
                )
            table[key] = value


def _resolve_config_path(
    *,
    config_path: Path | None,
    env_map: Mapping[str, str],
    cwd: Path,
) -> tuple[Path, bool]:
    if config_path is not None:
        return config_path.expanduser(), True
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser(), True
    return cwd / CONFIG_FILENAME, False


def _coerce_optional_path(value: object, *, field: str) -> Path | None:
    if value is None:
        return None
    if isinstance(value, str):
        raw = value.strip()
        return Path(raw).expanduser() if raw else None
    raise QuizdeckConfigError(f"{field} must be a string.")


def _normalize_order(value: object) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(
        isinstance(item, str) for item in value
    ):
        raise QuizdeckConfigError("quizzes.order must be a list of strings.")
    seen: set[str] = set()
    result: list[str] = []
    for item in value:
        quiz_id = item.strip()
        if not quiz_id:
            raise QuizdeckConfigError(
                "quizzes.order entries must be non-empty."
            )
        if quiz_id not in seen:
            seen.add(quiz_id)
            result.append(quiz_id)
    return tuple(result)


def _optional_string(value: object, *, field: str) -> str | None:
    if not isinstance(value, str):
        raise QuizdeckConfigError(f"{field} must be a string.")
    return value.strip() or None


def _require_string(value: object, *, field: str) -> str:
    text = _optional_string(value, field=field)
    if text is None:
        raise QuizdeckConfigError(f"{field} must be a non-empty string.")
    return text


def _resolve_log_level(candidate: object) -> str:
    if not isinstance(candidate, str) or not candidate.strip():
        raise QuizdeckConfigError("logging.level must be a non-empty string.")
    level = candidate.strip().upper()
    if level not in _LOG_LEVELS:
        raise QuizdeckConfigError(
            "logging.level must be one of "
            + ", ".join(sorted(_LOG_LEVELS))
            + "."
        )
    return level


def _resolve_verbose(override: bool | None, file_value: object) -> bool:
    if override is not None:
        return override
    if not isinstance(file_value, bool):
        raise QuizdeckConfigError("logging.verbose must be a boolean.")
    return file_value


def _parse_env_path(env_map: Mapping[str, str], key: str) -> Path | None:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    return Path(raw).expanduser()


def _parse_env_string(env_map: Mapping[str, str], key: str) -> str | None:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
