"""
End-to-End Demo Script for the BoneScan AI Pipeline

Runs canned vision model replies through the full post-processing chain,
with no network access:
1. Response parsing (fenced and bare JSON)
2. Schema validation
3. Scope filter + specialist routing
4. PDF report generation

Run: python demo.py
"""
import asyncio
from pathlib import Path

from bonescan.core.clinical import PolicyMode
from bonescan.services import AnalysisService
from bonescan.utils import BoneScanError, setup_logging

CANNED_REPLIES = {
    "Distal radius fracture (model picked the wrong specialist)": (
        "```json\n"
        '{"detected": true, "condition": "Distal Radius Fracture", "severity": "Moderate", '
        '"affectedRegion": "Left Distal Radius", '
        '"findings": "Transverse fracture of the distal radius with mild dorsal angulation. '
        'No intra-articular extension.", '
        '"medication": "Ibuprofen 400 mg as needed for pain", "doctorType": "Cardiologist", '
        '"urgency": "Within 24 hours", "additionalNotes": "Cast immobilization for 6 weeks."}\n'
        "```"
    ),
    "Osteoarthritis (out of scope for fracture-only)": (
        '{"detected": true, "condition": "Osteoarthritis of Knee", "severity": "Mild", '
        '"affectedRegion": "Right Knee", "findings": "Joint space narrowing with osteophytes.", '
        '"medication": "Paracetamol", "doctorType": "Rheumatologist", '
        '"urgency": "Routine", "additionalNotes": ""}'
    ),
    "L4 compression fracture": (
        '{"detected": true, "condition": "Compression Fracture", "severity": "Severe", '
        '"affectedRegion": "L4 Vertebral Body", "findings": "Loss of anterior vertebral height of 40%.", '
        '"medication": "Analgesics", "doctorType": "Orthopedic Surgeon", '
        '"urgency": "Immediate", "additionalNotes": "Spinal precautions."}'
    ),
    "Malformed reply": "I could not read this image, sorry.",
}


class CannedVisionModel:
    """Returns a fixed reply instead of calling the hosted model."""

    def __init__(self, reply: str):
        self.reply = reply

    async def analyze_image(self, image: bytes, mime_type: str) -> str:
        return self.reply


async def main() -> None:
    setup_logging("WARNING")

    print("=" * 60)
    print("BONESCAN AI - POST-PROCESSING PIPELINE DEMO")
    print("=" * 60)

    last_record = None
    for label, reply in CANNED_REPLIES.items():
        service = AnalysisService(CannedVisionModel(reply), policy=PolicyMode.FRACTURE_ONLY)
        print(f"\n▶ {label}")
        try:
            record = await service.analyze(b"demo-image-bytes", "image/png")
        except BoneScanError as e:
            print(f"   ✗ {e.code}: {e.message}")
            continue

        last_record = record
        print(f"   ✓ detected:   {record.detected}")
        print(f"   ✓ condition:  {record.condition}")
        print(f"   ✓ severity:   {record.severity.value}")
        print(f"   ✓ urgency:    {record.urgency.value}")
        print(f"   ✓ specialist: {record.doctor_type}")

    if last_record is not None:
        out_dir = Path("reports")
        out_dir.mkdir(exist_ok=True)
        report = service.render_report(last_record)
        path = out_dir / report.filename
        path.write_bytes(report.pdf_bytes)
        print(f"\n📄 Report {report.report_id} written to {path} ({report.page_count} page(s))")

    print()
    print("To run the API server:")
    print("  uvicorn bonescan.main:app --reload --port 8000")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
