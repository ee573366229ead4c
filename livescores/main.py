"""Entry point for the live scoreboard server."""

from __future__ import annotations

import logging


def main() -> None:
    import uvicorn

    from livescores.config import load_settings
    from livescores.web.app import create_app

    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
