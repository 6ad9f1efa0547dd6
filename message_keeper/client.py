"""
The message keeper client.

Takes a text file and sends each line to the server as a new message, then
searches all messages containing a random substring of that line, just to
put more load on the server.
"""

import logging
import random
import sys
from typing import Optional, Sequence

from message_keeper.config import settings
from message_keeper.exceptions import RegistryError, RemoteError
from message_keeper.logging_utils import setup_logging
from message_keeper.registry import locate_registry
from message_keeper.schemas import CLIENT_USAGE, ClientArgs
from message_keeper.utils import random_substring

logger = logging.getLogger(__name__)


class MessageKeeperClient:

    def __init__(self, message_keeper, rng: Optional[random.Random] = None):
        self.message_keeper = message_keeper
        self.random = rng or random.Random()

    def process_file_lines(self, path: str) -> int:
        """
        Send every line of ``path`` until end of file or the first empty line.
        Bytes that are not valid UTF-8 come through as U+FFFD.

        Returns:
            Number of lines processed
        """
        processed = 0
        with open(path, encoding="utf-8", errors="replace") as reader:
            for raw_line in reader:
                line = raw_line.rstrip("\r\n")
                if not line:
                    break
                self.process_line(line)
                processed += 1
        logger.info(f"Processed {processed} lines from: {path}")
        return processed

    def process_line(self, line: str) -> int:
        logger.info(f"Sending message: {line}")
        self.message_keeper.save_message(line)
        substring = random_substring(line, self.random)
        logger.info(f"Finding messages: {substring}")
        messages = self.message_keeper.find_messages(substring)
        logger.info(f"Got {len(messages)} messages for substring: {substring}")
        return len(messages)


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    try:
        args = ClientArgs.from_argv(argv)
    except ValueError:
        print(CLIENT_USAGE)
        return 255

    setup_logging(settings.LOG_LEVEL)

    logger.info(f"Binding to registry: {args.registry_host}:{args.registry_port}")
    try:
        with locate_registry(args.registry_host, args.registry_port) as registry:
            proxy = registry.lookup_keeper(settings.BINDING_NAME)
        with proxy:
            client = MessageKeeperClient(proxy)
            logger.info(f"Processing file: {args.messages_file_path}")
            client.process_file_lines(args.messages_file_path)
    except (RemoteError, RegistryError) as e:
        logger.error(f"Remote call failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"Could not read messages file: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
