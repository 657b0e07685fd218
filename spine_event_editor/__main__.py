import argparse
import logging
import os
import sys

import pygame

from .configuration import SCREEN_HEIGHT, SCREEN_WIDTH
from .event_editor import FrameEventEditor
from .logging_config import setup_logging
from .session import AnimationSession
from .skeleton_player import SkeletonPlayer

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="spine-event-editor",
                                     description="Attach frame events to PySpine animation clips")
    parser.add_argument("skeleton", nargs="?", default="bone_project.json",
                        help="PySpine rig file (bones, optionally with an 'animations' mapping)")
    parser.add_argument("-a", "--animation-file", action="append", default=[],
                        help="bone animation file to add as a clip (repeatable)")
    parser.add_argument("-e", "--events", help="event file (default: <skeleton>_events.json)")
    parser.add_argument("-c", "--clip", help="clip to open first")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--width", type=int, default=SCREEN_WIDTH)
    parser.add_argument("--height", type=int, default=SCREEN_HEIGHT)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)

    pygame.init()
    player = SkeletonPlayer()
    if os.path.exists(args.skeleton):
        player.load_skeleton(args.skeleton)
    else:
        logger.warning("Skeleton file not found: %s", args.skeleton)
        player.skeleton_file = args.skeleton

    animation_files = list(args.animation_file)
    if not animation_files and os.path.exists("bone_animation.json"):
        animation_files.append("bone_animation.json")
    for filename in animation_files:
        player.load_animation(filename)

    session = AnimationSession(player, event_file_path=args.events)

    editor = FrameEventEditor(session, args.width, args.height)

    names = player.list_animation_names()
    first_clip = args.clip or (names[0] if names else None)
    if first_clip:
        session.switch_clip(first_clip, save_events=False)

    editor.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
