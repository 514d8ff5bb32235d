import asyncio
import time


class FixedSource:
    """Random source that always lands at the same point of each range.

    ``u=0.5`` gives zero noise, ``u=1.0`` always the top of the range.
    """

    def __init__(self, u: float = 0.5, pick: int = 0):
        self.u = u
        self.pick = pick

    def uniform(self, a, b):
        return a + (b - a) * self.u

    def choice(self, seq):
        return seq[self.pick]


async def wait_until(predicate, timeout: float = 2.0, step: float = 0.005):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(step)
