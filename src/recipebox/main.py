"""Application entry point for RecipeBox backend server."""

from recipebox.app import App
from recipebox.config import Config
from recipebox.logging import setup_logging
from recipebox.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
