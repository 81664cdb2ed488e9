"""Hook execution: batch sequences, live streaming and output buffering.

Usage:
    hooks = create_hooks(["pytest -q", "make dist"], HookPhase.PRE_TAG)
    outcome = run_sequence(hooks, context, policy=FailurePolicy.FAIL_CLOSED)
    if not outcome.ok:
        print(outcome.failure.message)

    stream = run_streaming(hook, context, cancel=token)
    for line in stream.lines():
        buffer.add_line(line)
    result = stream.result()
"""

from .buffer import OutputBuffer
from .cancel import CancelToken
from .runner import (
    FailurePolicy,
    HookFailure,
    SequenceOutcome,
    build_env,
    failure_message,
    run_hook,
    run_sequence,
)
from .streaming import LINE_QUEUE_CAPACITY, HookStream, run_streaming
from .types import (
    Hook,
    HookContext,
    HookError,
    HookPhase,
    HookResult,
    OutputLine,
    Stream,
    create_hooks,
)

__all__ = [
    # types
    "Hook",
    "HookContext",
    "HookError",
    "HookPhase",
    "HookResult",
    "OutputLine",
    "Stream",
    "create_hooks",
    # buffer
    "OutputBuffer",
    # cancel
    "CancelToken",
    # runner
    "FailurePolicy",
    "HookFailure",
    "SequenceOutcome",
    "build_env",
    "failure_message",
    "run_hook",
    "run_sequence",
    # streaming
    "LINE_QUEUE_CAPACITY",
    "HookStream",
    "run_streaming",
]
