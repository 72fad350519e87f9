#!/usr/bin/env python3
import argparse
import sys
from skidstall.config import EngineConfig
from skidstall.engine import ResolutionEngine
from skidstall.logger import configure_logger
from skidstall.models import ResolutionSummary, SourceKind
from skidstall.preflight import PrivilegeError, ensure_privileges


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Install Arch packages with interactive fallback to alternatives',
        prog='skidstall'
    )
    parser.add_argument('--log-dir', help='Directory for the run log')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Install command
    install_parser = subparsers.add_parser('install', help='Install packages')
    install_parser.add_argument('packages', nargs='+', help='Package names to install')
    install_parser.add_argument('--auto', action='store_true',
                                help='Run without prompts; unresolved packages are deferred')
    install_parser.add_argument('--auto-substitute', action='store_true',
                                help='With --auto, install the first alternative found')
    install_parser.add_argument('--aur', action='store_true',
                                help='Install the packages from the AUR')
    install_parser.add_argument('--optional', action='store_true',
                                help='Treat the packages as non-critical; failures are skipped')

    # Search command
    search_parser = subparsers.add_parser('search', help='Search both sources')
    search_parser.add_argument('query', help='Search query')
    search_parser.add_argument('--aur', action='store_true',
                               help='Search the AUR only')

    return parser.parse_args(argv)


def print_summary(summary: ResolutionSummary, log_path: str):
    """Render the end-of-run report"""
    print()
    print("Installation Summary")
    print("=" * 40)

    if summary.installed_count:
        print(f"[+] Successfully installed: {summary.installed_count} packages")

    if summary.deferred:
        print(f"[!] Deferred packages: {len(summary.deferred)}")
        for name in summary.deferred:
            print(f"  - {name}")

    if summary.failed:
        print(f"[!] Failed packages: {len(summary.failed)}")
        for name in summary.failed:
            print(f"  - {name}")
    elif not summary.deferred and not summary.skipped:
        print("[+] All packages installed successfully!")

    if summary.skipped:
        print(f"[i] Skipped optional packages: {len(summary.skipped)}")
        for name in summary.skipped:
            print(f"  - {name}")

    print(f"[i] Full log available at: {log_path}")


def cmd_install(args, logger):
    """Execute install command"""
    config = EngineConfig.from_args(args)

    try:
        ensure_privileges()
    except PrivilegeError as e:
        logger.log_error(str(e))
        return 1

    engine = ResolutionEngine.from_config(config, logger=logger)
    source = SourceKind.COMMUNITY if args.aur else SourceKind.PRIMARY
    engine.resolve(args.packages, source=source, optional=args.optional)
    summary = engine.finalize()

    print_summary(summary, logger.get_log_file_path())
    return 2 if summary.failed else 0


def cmd_search(args, logger):
    """Execute search command"""
    engine = ResolutionEngine.from_config(EngineConfig(unattended=True), logger=logger)
    sources = (SourceKind.COMMUNITY,) if args.aur else (SourceKind.PRIMARY, SourceKind.COMMUNITY)
    candidates = engine.registry.search_all(args.query, exclude_term=False, sources=sources)

    for candidate in candidates:
        print(f"  {candidate.name} ({candidate.source.value})")
    return 0


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    if not args.command:
        print("Error: No command specified. Use --help for usage.")
        return 1

    logger = configure_logger(log_dir=args.log_dir)

    if args.command == 'install':
        return cmd_install(args, logger)
    elif args.command == 'search':
        return cmd_search(args, logger)

    return 0


if __name__ == '__main__':
    sys.exit(main())
