"""
Command execution utilities.

This module provides tools for executing system utilities with simulation support.
In simulation mode state-changing commands are recorded and logged instead of run,
while queries issued through run_real still reach the real system.
"""
import logging
import os
import subprocess
import uuid
from enum import Enum
from typing import Dict, List, Any

from automount.utils.format import TermColors, colorize

logger = logging.getLogger('automount')


class SimulationMode(Enum):
    """Enumeration for simulation modes"""
    DISABLED = 0  # Normal operation
    SIMULATE = 1  # Simulate operations


class CommandRunner:
    """
    Class responsible for command execution with simulation support.
    Acts as a wrapper around subprocess.run with additional functionality.
    """
    def __init__(self, simulation_mode: SimulationMode, colored_output: bool = True):
        """
        Initialize the command runner.

        Args:
            simulation_mode: Simulation mode to operate in
            colored_output: Whether to use colored output in terminal
        """
        self.simulation_mode = simulation_mode
        self.colored_output = colored_output
        self.commands_run: List[Dict[str, Any]] = []

        # Short identifier shown in simulated command logs
        self.simulation_id = str(uuid.uuid4())[:8]

    @property
    def simulating(self) -> bool:
        return self.simulation_mode == SimulationMode.SIMULATE

    def run(self, cmd: List[str], check: bool = True, **kwargs) -> subprocess.CompletedProcess:
        """
        Run a state-changing command or simulate running it.

        Args:
            cmd: Command to run as list of strings
            check: Whether to check for non-zero return code
            **kwargs: Additional arguments to pass to subprocess.run

        Returns:
            CompletedProcess instance from subprocess.run

        Raises:
            subprocess.CalledProcessError: If check is set and the command fails
        """
        cmd_str = ' '.join(cmd)
        logger.debug(f"Command requested: {cmd_str}")

        self.commands_run.append({
            "command": list(cmd),
            "simulated": self.simulating
        })

        if self.simulating:
            sim_prefix = colorize(f"[SIM:{self.simulation_id}]", TermColors.SIM, self.colored_output)
            logger.info(f"{sim_prefix} Would execute: {cmd_str}")
            return subprocess.CompletedProcess(args=cmd, returncode=0, stdout="", stderr="")

        return self._execute(cmd, check, **kwargs)

    def run_real(self, cmd: List[str], check: bool = True, **kwargs) -> subprocess.CompletedProcess:
        """
        Run a command for real, even in simulation mode.
        This is used for read-only queries such as lsblk, blkid and findmnt.

        Args:
            cmd: Command to run as list of strings
            check: Whether to check for non-zero return code
            **kwargs: Additional arguments to pass to subprocess.run

        Returns:
            CompletedProcess instance from subprocess.run
        """
        logger.debug(f"Running query: {' '.join(cmd)}")
        return self._execute(cmd, check, **kwargs)

    def _execute(self, cmd: List[str], check: bool, **kwargs) -> subprocess.CompletedProcess:
        cmd_str = ' '.join(cmd)
        try:
            return subprocess.run(
                cmd,
                check=check,
                text=True,
                capture_output=True,
                **kwargs
            )
        except subprocess.CalledProcessError as e:
            logger.error(colorize(f"Command failed: {cmd_str}", TermColors.ERROR, self.colored_output))
            logger.error(f"Return code: {e.returncode}")
            logger.error(f"Stdout: {e.stdout}")
            logger.error(f"Stderr: {e.stderr}")
            raise

    def get_simulation_report(self) -> str:
        """
        Generate a report of all simulated commands.

        Returns:
            Formatted string with report of simulated commands
        """
        if not self.simulating:
            return "Simulation mode is not active."

        report = []
        report.append("=" * 80)
        report.append(f"SIMULATION REPORT [ID: {self.simulation_id}]")
        report.append("=" * 80)
        report.append("")

        simulated = [record for record in self.commands_run if record["simulated"]]

        # Group commands by executable name
        command_groups: Dict[str, List[List[str]]] = {}
        for record in simulated:
            cmd = record["command"]
            cmd_type = os.path.basename(cmd[0]) if cmd else "unknown"
            command_groups.setdefault(cmd_type, []).append(cmd)

        for cmd_type, commands in command_groups.items():
            report.append(f"{cmd_type.upper()} COMMANDS:")
            report.append("-" * 40)
            for i, cmd in enumerate(commands, 1):
                report.append(f"{i}. {' '.join(cmd)}")
            report.append("")

        report.append("-" * 80)
        report.append(f"Total commands simulated: {len(simulated)}")
        report.append("=" * 80)

        return "\n".join(report)
