#!/usr/bin/env python3
"""
Demo script: run the shipment pipeline locally with simulated agents.

Shows the event stream, agent progress and the final disposition for a
couple of sample shipments.

Usage:
    cd backend
    python -m scripts.demo_pipeline [--seed 7] [--delay-scale 0.1]
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

SEVERITY_ICONS = {"info": "→", "success": "✓", "warning": "⚠", "error": "✗"}


def _sample_shipments():
    from trademind.pipeline.context import Document, Goods, Party, ShipmentRecord

    electronics = ShipmentRecord(
        exporter=Party("Shenzhen Micro Co.", "88 Keji Rd, Shenzhen", "China"),
        importer=Party("Northwind Components", "12 Harbor St, Oakland", "United States"),
        goods=Goods(
            description="Microcontroller units for industrial automation",
            quantity=5000,
            unit="pcs",
            value=185_000,
            currency="USD",
            weight=420,
            weight_unit="kg",
        ),
        reference_number="TM-2026-0001",
    )
    for name in ("commercial_invoice_0001.pdf", "packing_list.pdf", "bill_of_lading.pdf"):
        electronics.add_document(Document.from_upload(electronics.id, name))

    instruments = ShipmentRecord(
        exporter=Party("Lumen Optics GmbH", "Optikweg 3, Jena", "Germany"),
        importer=Party("Pacific Labs", "400 Science Park, Singapore", "Singapore"),
        goods=Goods(
            description="Spectrometers and optical measurement instruments",
            quantity=40,
            unit="units",
            value=92_500,
            weight=310,
        ),
        reference_number="TM-2026-0002",
    )
    instruments.add_document(Document.from_upload(instruments.id, "invoice_lumen.pdf"))
    instruments.add_document(Document.from_upload(instruments.id, "certificate_of_origin.pdf"))

    return [electronics, instruments]


def _print_event(event):
    icon = SEVERITY_ICONS.get(str(event.severity), "•")
    print(f"  {icon} [{event.agent_name:<22}] {event.action}: {event.detail}")


async def run_demo(seed: int | None, delay_scale: float) -> None:
    import random

    from trademind.agents.simulated import SimulatedStageFunctions
    from trademind.pipeline.agents import AgentStateTracker
    from trademind.pipeline.engine import ShipmentOrchestrator
    from trademind.repositories.shipments import ShipmentStore

    store = ShipmentStore()
    functions = SimulatedStageFunctions(rng=random.Random(seed), delay_scale=delay_scale)

    for shipment in _sample_shipments():
        store.add_shipment(shipment)

        print("\n" + "=" * 70)
        print(f"  Shipment {shipment.reference_number} ({shipment.id})")
        print("=" * 70)

        orchestrator = ShipmentOrchestrator(
            functions,
            tracker=AgentStateTracker(agents=store.agents),
            on_event=_print_event,
        )
        store.attach(orchestrator, shipment.id)
        final = await orchestrator.process_shipment(shipment)
        _print_result(final, orchestrator.last_run)

    _print_stats(store)


def _print_result(shipment, run):
    print(f"\n{'─' * 50}")
    print(f"  Status       : {shipment.status}")
    print(f"  Stages       : {run.stages_completed}/{run.total_stages}")
    print(f"  Duration     : {run.total_duration_ms}ms")
    if shipment.hs_code:
        print(f"  HS code      : {shipment.hs_code.code} ({shipment.hs_code.category})")
    if shipment.duty_calculation:
        duty = shipment.duty_calculation
        print(f"  Duties       : {duty.total_amount} {duty.currency}")
    if shipment.risk_score:
        print(f"  Risk         : {shipment.risk_score.level} ({shipment.risk_score.overall}/100)")
    if shipment.optimized_route:
        print(f"  Route        : {' → '.join(shipment.optimized_route.path)}")
    print(f"{'─' * 50}")


def _print_stats(store):
    stats = store.dashboard_stats()
    print("\n  Dashboard:")
    for key, value in stats.to_dict().items():
        print(f"    {key:<20}: {value}")
    print()


def main():
    parser = argparse.ArgumentParser(description="Run the shipment pipeline demo")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for simulated agents")
    parser.add_argument(
        "--delay-scale",
        type=float,
        default=0.1,
        help="Multiplier for simulated agent latency (0 disables it)",
    )
    args = parser.parse_args()

    from trademind.core.logging import setup_logging
    setup_logging("WARNING")     # quiet logs, show formatted output only

    asyncio.run(run_demo(args.seed, args.delay_scale))


if __name__ == "__main__":
    main()
