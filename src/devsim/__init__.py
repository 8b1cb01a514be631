"""
devsim: a DEVS discrete-event simulation kernel

Independent models exchange typed values through declared ports, and a
coordinating engine advances a logical clock by executing the next
scheduled activity.

Core concepts:
- Models only talk through ports; the engine routes emissions
- Continuations are queue entries (model id + time), not suspended frames
- Everything happening at one instant is resolved before the clock moves
- Randomness is per model, derived from one seed and the model id
"""

__version__ = "0.1.0"
