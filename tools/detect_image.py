#!/usr/bin/env python3
"""
Run the detector on a single image and print the decoded detections.

Useful for checking a model/label pair and the decoder without a camera.

Usage:
    python tools/detect_image.py --model models/ssd_mobilenet_v1.tflite --image street.jpg
    python tools/detect_image.py --model ... --image ... --threshold 0.3 --out annotated.jpg
"""

import argparse
import os
import sys
import time

# Add project directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

import cv2

from detection.decoder import decode
from inference.labels import LabelTable
from inference.preprocess import to_model_input
from inference.tflite_backend import TFLiteBackend, TFLiteConfig
from pipeline.annotate import draw_detections


def main():
    parser = argparse.ArgumentParser(description="Decode detector output for one image")
    parser.add_argument("--model", required=True, help="Path to .tflite model")
    parser.add_argument("--image", required=True, help="Path to input image")
    parser.add_argument("--labels", default="config/labels.json", help="Label file (.json or .txt)")
    parser.add_argument("--threshold", type=float, default=0.5, help="Confidence threshold")
    parser.add_argument("--out", default=None, help="Write an annotated copy here")
    args = parser.parse_args()

    frame = cv2.imread(args.image)
    if frame is None:
        print(f"Could not read image: {args.image}")
        return 1

    labels = LabelTable.load(args.labels) if os.path.exists(args.labels) else LabelTable()
    backend = TFLiteBackend(TFLiteConfig(model_path=args.model))

    start = time.time()
    tensors = backend.run(to_model_input(frame, backend.input_size))
    elapsed_ms = (time.time() - start) * 1000

    h, w = frame.shape[:2]
    detections = decode(tensors, w, h, args.threshold, labels=labels)

    print(f"Inference: {elapsed_ms:.1f} ms, {len(detections)} detection(s) >= {args.threshold:.2f}")
    for det in detections:
        b = det.box
        print(f"  {det.caption:<28} x={b.x:.0f} y={b.y:.0f} w={b.width:.0f} h={b.height:.0f}")

    if args.out:
        cv2.imwrite(args.out, draw_detections(frame, detections))
        print(f"Annotated image written to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
