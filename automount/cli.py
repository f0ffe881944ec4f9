"""
Command-line interface for automount.

This module handles argument parsing and runs the provisioning stages in order:
disk selection, mount directory, filesystem preparation, mount and fstab.
"""
import argparse
import logging
from typing import List, Optional

from automount.utils.logging import setup_logging
from automount.utils.command import CommandRunner, SimulationMode
from automount.utils.format import TermColors, colorize, rule
from automount.utils.prompt import Prompter
from automount.utils.types import MountRequest
from automount.utils.validation import check_prerequisites
from automount.core.system import SystemTools
from automount.core.disk import select_disk
from automount.core.filesystem import prepare_filesystem
from automount.core.mount import ask_mount_point, mount_disk
from automount.config.fstab import setup_fstab
from automount.core.exceptions import AutomountError

logger = logging.getLogger('automount')


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Namespace containing parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Interactively format, mount and register an unused disk in /etc/fstab"
    )

    parser.add_argument(
        "-s", "--simulate",
        action="store_true",
        help="Show what would be done without formatting, mounting or editing /etc/fstab"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def display_simulation_summary(cmd_runner: CommandRunner) -> None:
    """
    Display the commands that simulation mode skipped.

    Args:
        cmd_runner: CommandRunner instance used during the run
    """
    if not cmd_runner.simulating:
        return

    stars = rule("*")
    colored = cmd_runner.colored_output

    print(f"\n{colorize(stars, TermColors.SIM, colored)}")
    print(colorize("SIMULATION COMPLETE - NO CHANGES WERE MADE", TermColors.SIM + TermColors.BOLD, colored))
    print(f"{colorize(stars, TermColors.SIM, colored)}\n")

    print(colorize("The following operations would have been performed:", TermColors.SUCCESS, colored))
    print(cmd_runner.get_simulation_report())

    print(f"\n{colorize('To execute these operations for real, run without the --simulate flag.', TermColors.SIM, colored)}")


def run(system: SystemTools, prompter: Prompter, cmd_runner: CommandRunner) -> MountRequest:
    """
    Run every provisioning stage, stopping at the first fatal error.

    Args:
        system: SystemTools instance for all external commands
        prompter: Prompter used to talk to the operator
        cmd_runner: CommandRunner instance, consulted for simulation and color settings

    Returns:
        The completed mount request

    Raises:
        AutomountError: On any fatal error or operator cancellation
    """
    colored = cmd_runner.colored_output

    request = MountRequest(
        device=select_disk(system, prompter, colored),
        mount_point="",
        filesystem="",
        formatted=False
    )
    request["mount_point"] = ask_mount_point(prompter, cmd_runner)

    prepare_filesystem(request, system, prompter, colored)
    mount_disk(request, system, colored)
    setup_fstab(request, system, colored)

    return request


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function.

    Returns:
        Exit code (0 for success, 1 for any error or cancellation)
    """
    args = None
    try:
        args = parse_arguments(argv)

        setup_logging(args.debug)

        cmd_runner = CommandRunner(
            SimulationMode.SIMULATE if args.simulate else SimulationMode.DISABLED,
            not args.no_color
        )

        if args.simulate:
            logger.info("Running in simulation mode - NO CHANGES WILL BE MADE")

        check_prerequisites(cmd_runner)

        request = run(SystemTools(cmd_runner), Prompter(), cmd_runner)

        if args.simulate:
            display_simulation_summary(cmd_runner)
        else:
            logger.info("")
            logger.info(colorize("=== All done ===", TermColors.SUCCESS, cmd_runner.colored_output))
            logger.info(f"Disk: {request['device']}")
            logger.info(f"Mount point: {request['mount_point']}")
            logger.info(f"Filesystem: {request['filesystem']}")

        return 0

    except AutomountError as e:
        logger.error(str(e))
        return 1

    except KeyboardInterrupt:
        logger.error("Operation cancelled by user")
        return 1

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args is not None and args.debug:
            import traceback
            traceback.print_exc()
        return 1
