"""
Manual connectivity check for the configured vision provider.

Sends one image through the provider and the full pipeline, then prints the
raw reply and the corrected record.

Usage:
    python scripts/check_vision_connection.py path/to/xray.png
"""
import asyncio
import mimetypes
import sys
from pathlib import Path

from bonescan.config import get_settings
from bonescan.core.llm import create_vision_client
from bonescan.services import AnalysisService
from bonescan.utils import BoneScanError


async def check(image_path: Path) -> int:
    settings = get_settings()
    print(f"Provider: {settings.vision_provider}  |  Policy: {settings.policy.value}")

    client = create_vision_client(settings)
    if not getattr(client, "is_available", True):
        print("❌ ERROR: No API key configured for this provider (see .env.example).")
        return 1

    image = image_path.read_bytes()
    mime_type = mimetypes.guess_type(image_path.name)[0] or "image/png"

    try:
        raw = await client.analyze_image(image, mime_type)
        print("\n" + "=" * 50)
        print("🤖 RAW MODEL REPLY:")
        print("=" * 50)
        print(raw)

        record = AnalysisService(client, policy=settings.policy).process_reply(raw)
        print("\n" + "=" * 50)
        print("✅ CORRECTED RECORD:")
        print("=" * 50)
        for key, value in record.to_dict().items():
            print(f"{key:>16}: {value}")
        return 0
    except BoneScanError as e:
        print(f"\n❌ {e.code}: {e.message}")
        return 1


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(check(Path(sys.argv[1]))))
