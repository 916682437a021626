"""Main entry point for the distload package.

Usage:
    python -m distload plan script.yml --chart plan.png
    python -m distload run script.yml --simulate
    python -m distload run script.yml --engine-command "artillery run {script} -o {report}"
    python -m distload serve --port 8080 --engine-command "artillery run {script} -o {report}"
"""

import sys


def main():
    """Main entry point that dispatches to subcommands."""
    if len(sys.argv) < 2:
        print_help()
        sys.exit(1)

    command = sys.argv[1]

    if command in ["-h", "--help", "help"]:
        print_help()
        sys.exit(0)

    # Remove the command from argv so subcommand parsers see correct args
    sys.argv = [sys.argv[0]] + sys.argv[2:]

    if command == "plan":
        from .cli.plan import main as plan_main

        plan_main()
    elif command == "run":
        from .cli.run import main as run_main

        run_main()
    elif command == "serve":
        from .cli.serve import main as serve_main

        serve_main()
    else:
        print(f"Unknown command: {command}")
        print_help()
        sys.exit(1)


def print_help():
    """Print help message."""
    print(
        """distload - distributed load test planner and dispatcher

Usage: python -m distload <command> [options]

Commands:
    plan      Show the jobs a script is split into (table, TSV, chart)
    run       Run a script in-process or through a worker server
    serve     Serve a worker over HTTP

Examples:
    # Preview the plan of a long script
    python -m distload plan script.yml --output plan.tsv --chart plan.png

    # Dispatch a script without generating load
    python -m distload run script.yml --simulate

    # Run against a worker server
    python -m distload run script.yml --worker-url http://localhost:8080/invoke

For command-specific help:
    python -m distload <command> --help
"""
    )


if __name__ == "__main__":
    main()
