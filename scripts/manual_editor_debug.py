"""One-off script for debugging the image editor callbacks on a local file."""

import argparse
from pathlib import Path

from PIL import Image

from config.settings import load_config
from modules.services.auth_service import UserSession
from modules.ui.callbacks import build_callbacks


def main() -> None:
    parser = argparse.ArgumentParser(description="Run image editor effects on a local image.")
    parser.add_argument("image", type=Path)
    parser.add_argument("--effects", nargs="*", default=["sepia", "sharpen"])
    parser.add_argument("--brightness", type=float, default=100)
    parser.add_argument("--rotate", type=float, default=0)
    parser.add_argument("--flatten", action="store_true")
    args = parser.parse_args()

    # 1. Real config; the editor itself is fully local so no services are needed
    config = load_config()
    callbacks = build_callbacks(config)
    user = UserSession(uid="debug", email="debug@localhost")

    # 2. Load the image and run the continuous pass first
    editor, _, status = callbacks["on_editor_upload"](user, Image.open(args.image))
    print("Status:", status)
    if editor is None:
        return
    editor, _, status = callbacks["on_editor_adjust"](
        editor, args.brightness, 100, 100, 0, args.rotate, False, False
    )
    print("Status:", status)

    # 3. One-shot effects compound on the current buffer
    for name in args.effects:
        editor, _, status = callbacks["on_editor_effect"](editor, name)
        print("Status:", status)

    path, status = callbacks["on_editor_export"](editor, args.flatten)
    print("Status:", status)
    if path:
        print("Saved:", Path(path).resolve())


if __name__ == "__main__":
    main()
