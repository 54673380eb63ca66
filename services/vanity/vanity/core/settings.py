import argparse, logging, os, re
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

DEFAULT_CONFIG = "/app/config/vanity.yaml"
DEFAULT_INTERVAL = "2m"
DEFAULT_PORT = 80
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DESCRIPTION = "vanity is a service that allows you to set custom import paths for your go packages"
USAGE = "vanity --host HOST_NAME [options]"

_DURATION = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}

@dataclass(frozen=True)
class Settings:
    host: str
    config: str = DEFAULT_CONFIG
    interval: float = 120.0
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

def parse_duration(value: str) -> float:
    """Seconds from '90', '90s', '2m', '1h30m' or '1.5h'."""
    s = (value or "").strip().lower()
    if not s:
        raise ValueError("empty duration")
    try:
        seconds = float(s)
    except ValueError:
        pos, seconds = 0, 0.0
        for m in _DURATION.finditer(s):
            if m.start() != pos:
                break
            seconds += float(m.group(1)) * _UNITS[m.group(2)]
            pos = m.end()
        if pos != len(s):
            raise ValueError(f"invalid duration {value!r}")
    if seconds <= 0:
        raise ValueError(f"duration must be positive, got {value!r}")
    return seconds

def _interval(value: str) -> float:
    try:
        return parse_duration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))

def _log_level(value: str) -> str:
    level = value.upper()
    if level not in VALID_LOG_LEVELS:
        raise argparse.ArgumentTypeError(f"must be one of {', '.join(VALID_LOG_LEVELS)}")
    return level

def build_parser(environ: Optional[Mapping[str, str]]=None) -> argparse.ArgumentParser:
    env = os.environ if environ is None else environ
    p = argparse.ArgumentParser(prog="vanity", usage=USAGE, description=DESCRIPTION)
    p.add_argument("--host", default=env.get("VANITY_HOST", ""),
                   help="custom domain name, e.g. example.com (env VANITY_HOST)")
    p.add_argument("--config", default=env.get("VANITY_CONFIG", DEFAULT_CONFIG),
                   help="config path or URL, e.g. /app/config/vanity.yaml or "
                        "https://example.com/vanity.yaml (env VANITY_CONFIG)")
    p.add_argument("--interval", type=_interval, default=env.get("VANITY_INTERVAL", DEFAULT_INTERVAL),
                   help="interval to refresh the config, e.g. 90s, 2m, 1h (env VANITY_INTERVAL)")
    p.add_argument("--port", type=int, default=env.get("VANITY_PORT", str(DEFAULT_PORT)),
                   help="port to listen on (env VANITY_PORT)")
    p.add_argument("--log-level", type=_log_level, default=env.get("LOG_LEVEL", "INFO"),
                   help="logging level (env LOG_LEVEL)")
    return p

def load_settings(argv: Optional[Sequence[str]]=None, environ: Optional[Mapping[str, str]]=None) -> Settings:
    """Flags win over environment, environment over defaults.

    A missing host is not an error here; callers print usage instead of serving.
    """
    ns = build_parser(environ).parse_args(argv)
    return Settings(host=ns.host, config=ns.config, interval=ns.interval,
                    port=ns.port, log_level=ns.log_level)

def configure_logging(level: str="INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
