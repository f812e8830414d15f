"""
pyselect command line

    pyselect list [filters]
    pyselect run  [filters] [--home DIR] [--no-user-base] -- CMD [ARGS...]
    pyselect env  [filters] [--shell powershell|cmd|bash]

Filters: --vendor, --tag, --version, --bits, --scope.
"""

import argparse
import os
import shlex
import subprocess
import sys
from typing import Dict, List, Optional

from .activation import ActivationManager
from .api import activate, list_distributions
from .config import PySelectConfig
from .exceptions import PySelectError
from .logger import Logger, get_module_logger
from .models import InstallScope, PlatformWidth
from .probe import InterpreterProbe

logger = get_module_logger(__name__)

SHELLS = ('powershell', 'cmd', 'bash')


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--vendor', '-c', help='Vendor (company) prefix, case-insensitive')
    parser.add_argument('--tag', '-t', help='Tag prefix, e.g. "3.11"')
    parser.add_argument('--version', '-p', help='Reported version prefix, e.g. "3.11"')
    parser.add_argument('--bits', '-b', type=int, choices=[32, 64], help='Platform width')
    parser.add_argument(
        '--scope', '-s',
        choices=[s.value for s in InstallScope],
        help='Install scope',
    )


def _add_activation_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--home', help='Set PYTHONHOME to this value instead of clearing it')
    parser.add_argument(
        '--no-user-base',
        action='store_true',
        help='Do not namespace PYTHONUSERBASE by platform width',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pyselect',
        description='List installed Python distributions and activate one',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  # All 64-bit Python 3 installs
  %(prog)s list --version 3 --bits 64

  # Run pip from the newest PythonCore 3.11
  %(prog)s run --vendor PythonCore --version 3.11 -- python -m pip list

  # Activate in the current PowerShell session
  %(prog)s env --version 3.12 --shell powershell | Invoke-Expression
        '''
    )
    parser.add_argument('--config', help='YAML configuration file')
    parser.add_argument(
        '--verbose', '-v',
        action='count',
        default=0,
        help='Increase verbosity (-v: INFO, -vv: DEBUG)'
    )

    sub = parser.add_subparsers(dest='command', required=True)

    list_parser = sub.add_parser('list', help='List matching distributions, best first')
    _add_filter_arguments(list_parser)

    run_parser = sub.add_parser('run', help='Run a command with a distribution activated')
    _add_filter_arguments(run_parser)
    _add_activation_arguments(run_parser)
    run_parser.add_argument('cmd', nargs=argparse.REMAINDER, help='Command to run (after --)')

    env_parser = sub.add_parser('env', help='Print shell statements that activate a distribution')
    _add_filter_arguments(env_parser)
    _add_activation_arguments(env_parser)
    env_parser.add_argument(
        '--shell',
        choices=SHELLS,
        default='powershell' if os.name == 'nt' else 'bash',
        help='Shell syntax to emit',
    )
    return parser


def _filters(args: argparse.Namespace) -> Dict[str, object]:
    return {
        'vendor': args.vendor,
        'tag': args.tag,
        'version': args.version,
        'platform_width': PlatformWidth(args.bits) if args.bits else None,
        'install_scope': InstallScope(args.scope) if args.scope else None,
    }


def _manager(config: dict, environ=None) -> ActivationManager:
    return ActivationManager(
        environ=environ,
        probe=InterpreterProbe(config['probe_timeout_seconds']),
        user_base_root=config['user_base_root'] or None,
    )


def _activate(args: argparse.Namespace, config: dict, manager: ActivationManager) -> None:
    """Activate the best match on *manager*; NoMatchError propagates to main()."""
    activate(
        **_filters(args),
        home=args.home,
        no_user_base=args.no_user_base,
        manager=manager,
        config=config,
    )


def emit(shell: str, name: str, value: Optional[str]) -> str:
    """One statement that sets (or, for None, removes) a variable."""
    if shell == 'bash':
        if value is None:
            return f'unset {name}'
        return f"export {name}={shlex.quote(value)}"
    if shell == 'powershell':
        if value is None:
            return f'Remove-Item Env:{name} -ErrorAction SilentlyContinue'
        safe = value.replace('`', '``').replace('"', '`"')
        return f'$env:{name} = "{safe}"'
    if shell == 'cmd':
        return f'set "{name}={value or ""}"'
    raise ValueError(f"unsupported shell: {shell}")


def environment_changes(before: Dict[str, str], after: Dict[str, str]) -> Dict[str, Optional[str]]:
    """Variables that differ; None marks a removed variable."""
    changes: Dict[str, Optional[str]] = {}
    for name in sorted(set(before) | set(after)):
        if before.get(name) != after.get(name):
            changes[name] = after.get(name)
    return changes


def cmd_list(args: argparse.Namespace, config: dict) -> int:
    matches = list_distributions(**_filters(args), config=config)
    if not matches:
        print("No Python distributions found.")
        return 0
    print(f"{'Vendor':<14} {'Tag':<12} {'Version':<10} {'Bits':<5} {'Scope':<12} Path")
    print("-" * 78)
    for dist in matches:
        print(
            f"{dist.vendor:<14} {dist.tag:<12} {dist.reported_version:<10} "
            f"{dist.platform_width.value:<5} {dist.install_scope.value:<12} {dist.install_path}"
        )
    return 0


def cmd_run(args: argparse.Namespace, config: dict) -> int:
    command = list(args.cmd)
    if command and command[0] == '--':
        command = command[1:]
    if not command:
        print("Error: no command given (use: pyselect run [filters] -- CMD)", file=sys.stderr)
        return 2

    manager = _manager(config)
    _activate(args, config, manager)
    try:
        return subprocess.call(command)
    finally:
        manager.deactivate()


def cmd_env(args: argparse.Namespace, config: dict) -> int:
    before = dict(os.environ)
    environ = dict(before)
    _activate(args, config, _manager(config, environ=environ))
    for name, value in environment_changes(before, environ).items():
        print(emit(args.shell, name, value))
    return 0


COMMANDS = {
    'list': cmd_list,
    'run': cmd_run,
    'env': cmd_env,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = PySelectConfig.load_config(args.config)
    except PySelectError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    level = config['log_level']
    if args.verbose >= 2:
        level = 'DEBUG'
    elif args.verbose == 1:
        level = 'INFO'
    Logger.init_logging(log_dir=config['log_dir'] or None, level=level)

    try:
        return COMMANDS[args.command](args, config)
    except PySelectError as exc:
        logger.error(str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
