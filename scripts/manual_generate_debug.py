"""One-off script for debugging generation through the relay and its fallback."""

from pathlib import Path

from config.settings import load_config
from modules.pipelines.image_generation import GenerationRequest
from modules.pipelines.options import AspectRatio
from modules.services.relay_client import RelayClient
from modules.utils.image_utils import data_uri_to_image
from modules.utils.logging import setup_logging


def main() -> None:
    # 1. Real configuration; start server.py first to exercise the relay path
    config = load_config()
    setup_logging(config)
    client = RelayClient(config)

    # 2. Optimize the prompt (falls back to the provider if the relay is down)
    prompt = "A futuristic banana spaceship orbiting Saturn"
    optimized = client.optimize_prompt(prompt)
    print("Optimized prompt:", optimized)

    # 3. Generate and save the image
    data_uri = client.generate_image(
        GenerationRequest(prompt=optimized, aspect_ratio=AspectRatio.WIDE)
    )
    out_path = Path("debug_generate_output.png")
    data_uri_to_image(data_uri).save(out_path)
    print("Image saved:", out_path.resolve())


if __name__ == "__main__":
    main()
