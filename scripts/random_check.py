import collections
import random
import sys

from game.presenters import select_presenters


def run(trials: int = 300, volunteers: int = 6) -> None:
    """How often each claimant gets picked when everyone starts level"""
    counts = collections.Counter()
    first_slot = collections.Counter()
    rng = random.Random()
    claimants = [f"p{i}" for i in range(volunteers)]
    for _ in range(trials):
        presenters = select_presenters(claimants, "owner", {}, rng=rng)
        first_slot[presenters[0]] += 1
        for player_id in presenters:
            if player_id != "owner":
                counts[player_id] += 1
    print(f"Trials: {trials}, Volunteers: {volunteers}")
    for player_id in claimants:
        print(player_id, counts[player_id], first_slot[player_id])
    print("owner first", first_slot["owner"])


if __name__ == "__main__":
    trials = int(sys.argv[1]) if len(sys.argv) > 1 else 300
    volunteers = int(sys.argv[2]) if len(sys.argv) > 2 else 6
    run(trials, volunteers)
