# main.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import argparse
import asyncio
import contextlib
import logging
import sys
import time

import constants as c
import drive_profiles as profiles
import trip_stats as stats
from drive_controller import DriveController
from drive_store import DriveStore
from fuel_price import FuelPriceClient, LocalFuelPrice, StaticFuelPrice
from logger import Logger


def build_parser():
    parser = argparse.ArgumentParser(description="Estimate fuel use from GPS speed.")
    parser.add_argument("--mode", choices=["drive", "stats", "trips", "delete"], default="drive")
    parser.add_argument("--profile", choices=sorted(profiles.PROFILES), default="mixed")
    parser.add_argument("--csv", help="replay a recorded drive (timestamp_ms,speed_mps)")
    parser.add_argument("--duration", type=float, default=600.0, help="synthetic drive length (s)")
    parser.add_argument("--speedup", type=float, default=1.0, help="run N times faster than real time")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--store", default=c.DRIVES_FILE)
    parser.add_argument("--log-file", default=c.LOGFILE)
    parser.add_argument("--price", type=float, default=None, help="fixed fuel price (pence/litre)")
    parser.add_argument("--home", type=float, nargs=2, metavar=("LAT", "LNG"),
                        help="look up the local price around this location")
    parser.add_argument("--price-url", default=c.FUEL_PRICE_URL)
    parser.add_argument("--start-time", type=float, help="start_time of the drive to delete")
    parser.add_argument("--debug", action="store_true", default=False, help="no CSV log, no dashboard")
    parser.add_argument("--verbose", "-v", action="count", default=0)
    return parser


def make_price_provider(args):
    if args.price is not None:
        return StaticFuelPrice(args.price)
    if args.home:
        lat, lng = args.home
        return LocalFuelPrice(FuelPriceClient(base_url=args.price_url), lat, lng)
    return None


def make_source(args):
    if args.csv:
        return profiles.csv_positions(args.csv, speedup=args.speedup)
    return profiles.synthetic_positions(
        profiles.create_profile(args.profile),
        args.duration,
        seed=args.seed,
        speedup=args.speedup,
        start_ms=time.time() * 1000.0,
    )


async def run_drive(args):
    controller = DriveController(
        store=DriveStore(args.store),
        price_provider=make_price_provider(args),
        tick_interval=c.TICK_INTERVAL_S / args.speedup,
    )

    telemetry_log = None
    dashboard_manager = None
    if not args.debug:
        from dashboard_manager import DashboardManager

        telemetry_log = Logger(controller.snapshot_dict, path=args.log_file)
        dashboard_manager = DashboardManager()
        controller.add_listener(telemetry_log.log)
        controller.add_listener(dashboard_manager.update)

    controller.start()
    pump = asyncio.create_task(controller.pump(make_source(args)))

    try:
        while not pump.done():
            await asyncio.sleep(0.1)
            if dashboard_manager:
                dashboard_manager.draw()
                if dashboard_manager.pause_requested:
                    dashboard_manager.pause_requested = False
                    print("Paused" if controller.toggle_pause() else "Resumed")
                if dashboard_manager.stopped:
                    break
    finally:
        pump.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await pump
        summary = await controller.stop()
        if telemetry_log:
            telemetry_log.close()
        if dashboard_manager:
            dashboard_manager.close()

    return summary


def print_summary(summary):
    print("=" * 50)
    print("           DRIVE SUMMARY")
    print("=" * 50)
    print(f"   Date            : {summary.date}")
    print(f"   Duration        : {stats.format_duration(summary.duration_seconds)}")
    print(f"   Distance        : {summary.distance_miles:.1f} mi")
    print(f"   Average speed   : {summary.average_speed_mph:.1f} mph")
    print(f"   Fuel used       : {summary.fuel_used_litres:.3f} L")
    print(f"   Fuel cost       : £{summary.fuel_cost:.2f}")
    print(f"   Estimated MPG   : {summary.estimated_mpg:.1f}")


def print_stats(store):
    drives = store.load()
    for period, title in (("week", "Weekly"), ("month", "Monthly"), ("year", "Yearly"), ("lifetime", "Lifetime")):
        s = stats.get_stats(drives, period)
        print(
            f"{title + ' Stats':16s} | drives {s['drives']:4d} | {s['miles']:8.1f} mi | "
            f"{s['hours']:6.2f} h | {s['avg_speed_mph']:5.1f} mph | "
            f"{s['avg_mpg']:5.1f} mpg | £{s['fuel_cost']:.2f}"
        )


def print_trips(store):
    trips = store.recent(count=len(store.load()))
    if not trips:
        print("No drives recorded")
    for record in trips:
        print(stats.format_trip_line(record))


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = DriveStore(args.store)

    if args.mode == "stats":
        print_stats(store)
        return 0
    if args.mode == "trips":
        print_trips(store)
        return 0
    if args.mode == "delete":
        if args.start_time is None:
            print("--start-time is required with --mode delete", file=sys.stderr)
            return 2
        removed = store.delete_by_start_time(args.start_time)
        print(f"Removed {removed} drive(s)")
        return 0

    if args.speedup <= 0:
        print("--speedup must be > 0", file=sys.stderr)
        return 2

    try:
        summary = asyncio.run(run_drive(args))
    except KeyboardInterrupt:
        print("\nDrive stopped by user")
        return 1

    if summary:
        print_summary(summary)
    print("Drive complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
