#!/usr/bin/env python3
"""
End‑to‑end sanity check:
  1. generate_pattern.py → one second of 480p frames (0..30)
  2. split_bmp_stream.py splits the stream back into frames
  3. the frame count must match

Uses the current Python interpreter (sys.executable) instead of the
string 'python' so it works on systems where only `python3` exists.
"""
import os
import subprocess
import sys


def run(cmd):
    """Run a subprocess, echoing the command line."""
    print("▶", " ".join(cmd))
    subprocess.check_call(cmd)


def main() -> None:
    local_folder = "./test_videos"
    os.makedirs(local_folder, exist_ok=True)

    stream = os.path.join(local_folder, "pattern_480.bmps")
    frames_dir = os.path.join(local_folder, "frames")
    last_frame = 30
    expected = last_frame + 1

    exe = sys.executable  # path to the current Python interpreter

    run([exe, "generate_pattern.py", "480",
         "-o", stream,
         "--last-frame", str(last_frame)])
    count = subprocess.check_output([
        exe,
        "split_bmp_stream.py",
        "-i", stream,
        "-o", frames_dir,
        "--debug"
    ]).decode().strip()

    print(f"Frames found : {count}")
    if int(count) == expected:
        print("\n✔ SUCCESS – every frame recovered.")
        sys.exit(0)
    else:
        print(f"\n✖ FAILURE – expected {expected} frames!")
        sys.exit(1)


if __name__ == "__main__":
    main()
