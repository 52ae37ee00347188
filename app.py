"""Application entry point for the AI Tools Suite."""

from __future__ import annotations

import sys
from typing import Optional

from config.settings import load_config
from modules.services.storage_service import StorageService
from modules.ui.layout import build_app
from modules.utils.logging import setup_logging


def main(config_path: Optional[str] = None) -> None:
    """Load configuration, prune old downloads and serve the Gradio interface."""
    config = load_config(config_path)
    logger = setup_logging(config)

    StorageService(config.output_dir).cleanup(max_items=config.max_output_batches)
    logger.info("Serving AI Tools Suite on %s:%d", config.server_name, config.server_port)

    app = build_app(config)
    app.queue()
    app.launch(server_name=config.server_name, server_port=config.server_port, share=False, inbrowser=False)


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)
