import base64
import json
import mimetypes
import os
import sys

import requests

API_URL = os.getenv("FACE_READING_API_URL", "http://localhost:8000/api/face-reading")


def to_data_url(path: str) -> str:
    mime = mimetypes.guess_type(path)[0] or "image/jpeg"
    with open(path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python scripts/smoke_face_reading.py <image-path> [repeat]")
        return 1

    image_path = sys.argv[1]
    repeat = int(sys.argv[2]) if len(sys.argv) > 2 else 1
    payload = {"image": to_data_url(image_path)}

    for attempt in range(1, repeat + 1):
        print(f"[{attempt}/{repeat}] POST {API_URL}")
        try:
            r = requests.post(API_URL, json=payload, timeout=120)
        except requests.RequestException as e:
            print(f"Request failed: {e}")
            return 1

        print(f"Status: {r.status_code}")
        try:
            body = r.json()
        except ValueError:
            print(r.text[:500])
            continue

        if r.ok:
            meta = body.get("meta", {})
            primary = body.get("rekomendasiJurusan", {}).get("utama", {})
            print(f"source={meta.get('source')} cached={meta.get('cached')} major={primary.get('kode')}")
            print(f"expression={body.get('expression', {}).get('baseLabel')} age={body.get('age', {}).get('headline')}")
        else:
            print(json.dumps(body, indent=2, ensure_ascii=False))

    return 0


if __name__ == "__main__":
    sys.exit(main())
