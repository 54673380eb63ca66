import logging, sys
from typing import Optional, Sequence
import uvicorn
from .core.settings import build_parser, configure_logging, load_settings
from .main import create_app

logger = logging.getLogger("vanity")

def main(argv: Optional[Sequence[str]]=None) -> int:
    settings = load_settings(argv)
    if not settings.host:
        build_parser().print_help()
        return 0

    configure_logging(settings.log_level)
    logger.info("serving %s on :%d from %s (refresh every %gs)",
                settings.host, settings.port, settings.config, settings.interval)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port,
                log_level=settings.log_level.lower(), log_config=None)
    return 0

if __name__ == "__main__":
    sys.exit(main())
