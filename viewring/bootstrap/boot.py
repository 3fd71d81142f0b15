import logging

from viewring.bootstrap.commands import COMMANDS
from viewring.bootstrap.config.loader import get_cli_args
from viewring.bootstrap.deps import get_renderer, get_resolver, get_topology
from viewring.core.errors import NotAReplicaError, ReplicationInvariantViolation
from viewring.core.helpers.utils import setup_logging


def main():
    cli = get_cli_args()
    setup_logging(cli.log_level)
    logger = logging.getLogger("bootstrap.boot")

    command = COMMANDS[cli.command]
    try:
        data = command(cli, get_resolver(), get_topology())
    except (NotAReplicaError, ReplicationInvariantViolation) as ex:
        logger.error(str(ex))
        raise SystemExit(1)
    except KeyError as ex:
        logger.error(f"Unknown topology entry: {ex}")
        raise SystemExit(1)

    print(get_renderer().render(data))


if __name__ == "__main__":
    main()
