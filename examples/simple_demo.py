#!/usr/bin/env python3
"""
Simple demo of a filequeue writer and reader.

Writes a handful of records, then reads them back sequentially and by
sequence number.
"""

import json
import sys
import tempfile
import time
from pathlib import Path

from filequeue import EndOfStream, QueueReader, QueueWriter
from filequeue.utils.config import Config
from filequeue.utils.logging import configure_logging_from_config


def main():
    config = Config()
    config.set("logging.level", "WARNING")
    config.set("logging.format", "console")
    configure_logging_from_config(config)

    with tempfile.TemporaryDirectory() as tmpdir:
        name = Path(tmpdir) / "demo.log"

        print("[1] Writing 10 records...")
        with QueueWriter.open(name) as writer:
            for i in range(10):
                message = {
                    "id": i,
                    "timestamp": int(time.time()),
                    "data": f"Hello from filequeue! Message #{i}",
                }
                written = writer.write(json.dumps(message).encode("utf-8"))
                print(f"  wrote record {i} ({written} bytes)")

        print("\n[2] Reading sequentially...")
        with QueueReader.open(name) as reader:
            while True:
                try:
                    payload = reader.read()
                except EndOfStream:
                    print(f"  end of stream at offset {reader.offset}")
                    break
                print(f"  {reader.offset - 1}: {json.loads(payload)['data']}")

            print("\n[3] Reading record 4 directly...")
            print(f"  {json.loads(reader.read_at(4))}")
            print(f"  cursor now at {reader.offset}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
