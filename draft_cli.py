#!/usr/bin/env python3
"""
Draft Board CLI

Run an offline snake draft from the command line. Drafts are stored as JSON
under the data directory (data/drafts/draft_<id>.json); players come from
data/players.json.

Usage:
    python draft_cli.py create "Home League" --teams 10 --rounds 15
    python draft_cli.py add-team 1 "Gridiron Gang" --position 1 --owner Sam
    python draft_cli.py start 1
    python draft_cli.py pick 1 --player 42
    python draft_cli.py status 1
    python draft_cli.py swap 1 3 4
    python draft_cli.py available 1 -p RB -p WR --search smith
"""

import argparse
import sys

from draftboard.config import get_config
from draftboard.errors import DraftBoardError
from draftboard.logging_config import setup_logging_from_config
from draftboard.service import DraftService, create_service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offline fantasy football snake draft board")
    parser.add_argument(
        "--data-dir", "-d",
        default=None,
        help="Path to data directory (defaults to data_dir from config)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a draft")
    create.add_argument("name", help="Draft name")
    create.add_argument("--teams", "-t", type=int, required=True, help="Number of teams (2-14)")
    create.add_argument("--rounds", "-r", type=int, default=None, help="Max rounds (0 = no cap)")
    create.add_argument("--scoring", default="PPR", help="Standard, Half-PPR or PPR")
    create.add_argument("--type", dest="draft_type", default="Redraft", help="Redraft or Dynasty")

    add_team = sub.add_parser("add-team", help="Register a team in a draft")
    add_team.add_argument("draft_id", type=int)
    add_team.add_argument("name", help="Team name")
    add_team.add_argument("--position", "-p", type=int, required=True, help="Draft position (1-N)")
    add_team.add_argument("--owner", default="", help="Owner name")

    for command, help_text in (
        ("start", "Start a draft once every slot has a team"),
        ("pause", "Pause an active draft"),
        ("resume", "Resume a paused draft"),
        ("complete", "Mark a draft as completed"),
        ("delete", "Delete a draft with its teams and picks"),
        ("undo", "Remove the last pick"),
        ("status", "Show who is on the clock and the picks so far"),
    ):
        cmd = sub.add_parser(command, help=help_text)
        cmd.add_argument("draft_id", type=int)

    pick = sub.add_parser("pick", help="Draft a player for the team on the clock")
    pick.add_argument("draft_id", type=int)
    pick.add_argument("--player", type=int, required=True, help="Player ID")
    pick.add_argument("--team", type=int, default=None, help="Team ID expected to be on the clock")
    pick.add_argument("--number", type=int, default=None, help="Overall pick number expected next")

    trade = sub.add_parser("trade", help="Give a recorded pick to another team")
    trade.add_argument("draft_id", type=int)
    trade.add_argument("pick_id", type=int)
    trade.add_argument("--to-team", type=int, required=True, help="Receiving team ID")
    trade.add_argument("--notes", default="", help="Trade notes for the audit log")

    update = sub.add_parser("update", help="Change settings of a draft in setup")
    update.add_argument("draft_id", type=int)
    update.add_argument("--name", default=None)
    update.add_argument("--teams", "-t", type=int, default=None)
    update.add_argument("--rounds", "-r", type=int, default=None)
    update.add_argument("--scoring", default=None)
    update.add_argument("--type", dest="draft_type", default=None)

    swap = sub.add_parser("swap", help="Exchange the draft positions of two teams")
    swap.add_argument("draft_id", type=int)
    swap.add_argument("team_a", type=int, help="Team ID")
    swap.add_argument("team_b", type=int, help="Team ID")

    available = sub.add_parser("available", help="List undrafted players by ADP")
    available.add_argument("draft_id", type=int)
    available.add_argument(
        "--position", "-p", action="append", default=None, help="Filter by position (repeatable)"
    )
    available.add_argument("--search", "-s", default="", help="Match player name or NFL team")
    available.add_argument("--limit", "-n", type=int, default=25, help="Number of players to show")

    add_player = sub.add_parser("add-player", help="Add a custom player to the player pool")
    add_player.add_argument("name", help="Player name")
    add_player.add_argument("--position", "-p", required=True, help="QB, RB, WR, TE, K, D/ST, DL, LB or DB")
    add_player.add_argument("--team", default="", help="NFL team abbreviation")
    add_player.add_argument("--bye", type=int, default=None, help="Bye week")

    return parser


def print_status(service: DraftService, draft_id: int) -> None:
    draft = service.get_draft(draft_id)
    teams = {t.id: t for t in service.get_teams(draft_id)}
    picks = service.get_picks(draft_id)

    rounds = draft.max_rounds if draft.max_rounds > 0 else "no cap"
    print(f"{draft.name} (#{draft.id}) - {draft.status}")
    print(f"  {draft.num_teams} teams, {rounds} rounds, {draft.scoring_format} {draft.draft_type}")

    if draft.status != "setup":
        clock = service.on_the_clock(draft_id)
        if clock is not None:
            print(f"  On the clock: {clock.team.team_name} (pick {clock.pick_number}, round {clock.round})")

    if picks:
        print("\n" + "=" * 60)
        print("PICKS")
        print("=" * 60)
        for p in picks:
            team_name = teams[p.team_id].team_name if p.team_id in teams else f"team {p.team_id}"
            traded = " (traded)" if p.is_traded else ""
            print(f"  {p.overall_pick:>3}. R{p.round} {team_name}: player {p.player_id}{traded}")


def run(args: argparse.Namespace, service: DraftService) -> None:
    if args.command == "create":
        draft = service.create_draft(
            args.name,
            args.teams,
            scoring_format=args.scoring,
            draft_type=args.draft_type,
            max_rounds=args.rounds,
        )
        print(f"✅ Created draft {draft.id}: {draft.name}")

    elif args.command == "update":
        draft = service.update_draft(
            args.draft_id,
            name=args.name,
            num_teams=args.teams,
            scoring_format=args.scoring,
            draft_type=args.draft_type,
            max_rounds=args.rounds,
        )
        print(f"✅ Updated draft {draft.id}: {draft.name}")

    elif args.command == "add-team":
        team = service.add_team(args.draft_id, args.name, args.position, owner_name=args.owner)
        print(f"✅ Added {team.team_name} (team {team.id}) at position {team.draft_position}")

    elif args.command == "swap":
        team_a, team_b = service.swap_positions(args.draft_id, args.team_a, args.team_b)
        print(
            f"✅ {team_a.team_name} now picks at {team_a.draft_position}, "
            f"{team_b.team_name} at {team_b.draft_position}"
        )

    elif args.command == "start":
        service.start_draft(args.draft_id)
        print(f"✅ Draft {args.draft_id} started")

    elif args.command == "pause":
        service.pause_draft(args.draft_id)
        print(f"⏸️  Draft {args.draft_id} paused")

    elif args.command == "resume":
        service.resume_draft(args.draft_id)
        print(f"✅ Draft {args.draft_id} resumed")

    elif args.command == "complete":
        service.complete_draft(args.draft_id)
        print(f"✅ Draft {args.draft_id} completed")

    elif args.command == "delete":
        service.delete_draft(args.draft_id)
        print(f"✅ Draft {args.draft_id} deleted")

    elif args.command == "pick":
        pick = service.make_pick(
            args.draft_id, args.player, team_id=args.team, overall_pick=args.number
        )
        print(f"✅ Pick {pick.overall_pick} (round {pick.round}): player {pick.player_id} to team {pick.team_id}")
        if service.get_draft(args.draft_id).is_completed:
            print("🏁 Draft complete")

    elif args.command == "undo":
        pick = service.undo_pick(args.draft_id)
        print(f"↩️  Undid pick {pick.overall_pick}")

    elif args.command == "trade":
        pick = service.trade_pick(args.draft_id, args.pick_id, args.to_team, notes=args.notes)
        print(f"✅ Pick {pick.overall_pick} now belongs to team {pick.team_id}")

    elif args.command == "status":
        print_status(service, args.draft_id)

    elif args.command == "available":
        players = service.available_players(
            args.draft_id, positions=args.position, search=args.search, limit=args.limit
        )
        draft = service.get_draft(args.draft_id)
        for player in players:
            rank = player.get_adp_rank(draft.draft_type, draft.scoring_format)
            rank_text = f"{rank:>4}" if rank is not None else "   -"
            print(f"  {rank_text}  {player.id:>5}  {player.name} ({player.position}, {player.team})")

    elif args.command == "add-player":
        player = service.add_custom_player(args.name, args.position, team=args.team, bye_week=args.bye)
        print(f"✅ Added player {player.id}: {player.name} ({player.position})")


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    setup_logging_from_config(config, verbose=args.verbose)

    service = create_service(config, data_dir=args.data_dir)

    try:
        run(args, service)
    except DraftBoardError as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
