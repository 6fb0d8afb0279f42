"""
BinWatch — Sensor Node Simulator
Posts ultrasonic readings for the sample bins the way the ESP32 nodes do.
Bins fill a little on every tick, so crossing alerts fire on the dashboard.
"""
import os
import random
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config.bins import SAMPLE_BINS
from client.api import BinWatchClient, ClientError
from config.settings import BIN_DEPTH_CM
from fill_model.sensing import level_from_distance

TICKS = int(os.getenv("SIM_TICKS", "20"))
TICK_SEC = float(os.getenv("SIM_TICK_SEC", "1.0"))


def main():
    client = BinWatchClient()
    levels = {bid: info["level"] for bid, info in SAMPLE_BINS.items()}

    print(f"📡 Simulating {len(levels)} sensor nodes → {client.base_url}")
    for tick in range(1, TICKS + 1):
        for bin_id in levels:
            levels[bin_id] = min(100, levels[bin_id] + random.choice([0, 0, 1, 2, 3]))
            # a full bin still reads a few millimeters; zero means no echo
            distance = max(0.5, BIN_DEPTH_CM * (100 - levels[bin_id]) / 100)
            level = level_from_distance(distance)
            try:
                client.report_reading(bin_id, level, round(distance, 1),
                                      timestamp=int(time.time() * 1000),
                                      battery=random.randint(10, 100))
            except ClientError as e:
                print(f"  ✗ {bin_id}: {e.message}")
                continue
        print(f"  Tick {tick}/{TICKS}: " + ", ".join(f"{b}={lv}%" for b, lv in levels.items()))
        time.sleep(TICK_SEC)

    print("✅ Simulation finished.")


if __name__ == "__main__":
    main()
