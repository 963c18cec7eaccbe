#!/usr/bin/env python3
"""Simple CLI for exercising the OpenSea tools and ENS resolution locally"""

import argparse
import asyncio
import json
from typing import Any, List, Optional

from walletlens.container import Services, build_services
from walletlens.logging_config import setup_logging
from walletlens.tools.ens_profile import batch_resolve_ens
from walletlens.tools.opensea import OPENSEA_TOOLS


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


async def cli_tools(services: Services):
    """List OpenSea operations (static catalog when the server is unreachable)"""
    tools = await services.invoker.list_operations()
    print(f"\n🧰 {len(tools)} OpenSea tools")
    print("=" * 50)
    for tool in tools:
        print(f"  {tool.get('name', '?'):<24} {tool.get('description', '')}")


async def cli_call(services: Services, name: str, raw_args: str, profiles: Optional[bool]):
    """Call one OpenSea tool and print the ENS-enhanced result"""
    try:
        arguments = json.loads(raw_args) if raw_args else {}
    except json.JSONDecodeError as e:
        print(f"❌ Invalid --args JSON: {e}")
        return

    if name not in OPENSEA_TOOLS:
        print(f"❌ Unknown tool: {name} (known: {', '.join(sorted(OPENSEA_TOOLS))})")
        return

    print(f"🔍 Calling {name}...")
    result = await services.opensea.run(name, arguments, include_ens_profiles=profiles)
    print_json(result)


async def cli_resolve(services: Services, inputs: List[str]):
    """Resolve ENS names / addresses to profiles"""
    result = await batch_resolve_ens(services.resolver, inputs)
    for entry in result["results"]:
        if entry.get("error"):
            print(f"❌ {entry['input']}: {entry['error']}")
            continue
        profile = entry.get("profile") or {}
        print(f"✅ {entry['input']}")
        print(f"   name:    {entry.get('ensName')}")
        print(f"   address: {entry.get('address')}")
        for field in ("avatar", "description", "url", "twitter", "github"):
            if profile.get(field):
                print(f"   {field + ':':<9}{profile[field]}")
    print(f"\nResolved {result['resolved']}/{result['totalInputs']}")


async def cli_enhance(services: Services, raw_payload: str, profiles: bool):
    """Attach ENS data to the addresses in a JSON payload"""
    try:
        payload = json.loads(raw_payload)
    except json.JSONDecodeError as e:
        print(f"❌ Invalid JSON payload: {e}")
        return
    print_json(await services.enhancer.enhance(payload, profiles))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="WalletLens CLI")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("tools", help="List OpenSea tools")

    call_parser = subparsers.add_parser("call", help="Call an OpenSea tool")
    call_parser.add_argument("name", help="Tool name (e.g. search, get_collection)")
    call_parser.add_argument("--args", default="", help="Tool arguments as JSON")
    call_parser.add_argument("--profiles", action="store_true", default=None, help="Attach full ENS profiles")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve ENS names or addresses")
    resolve_parser.add_argument("inputs", nargs="+", help="ENS names or 0x addresses")

    enhance_parser = subparsers.add_parser("enhance", help="Attach ENS data to a JSON payload")
    enhance_parser.add_argument("payload", help="JSON object")
    enhance_parser.add_argument("--profiles", action="store_true", help="Attach full ENS profiles")

    return parser


async def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    setup_logging(args.log_level)
    services = build_services()
    try:
        if args.command == "tools":
            await cli_tools(services)
        elif args.command == "call":
            await cli_call(services, args.name, args.args, args.profiles)
        elif args.command == "resolve":
            await cli_resolve(services, args.inputs)
        elif args.command == "enhance":
            await cli_enhance(services, args.payload, args.profiles)
        else:
            print(f"❌ Unknown command: {args.command}")
            parser.print_help()
    finally:
        await services.aclose()


if __name__ == "__main__":
    asyncio.run(main())
