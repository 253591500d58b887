"""Simulated traces of a case study under a policy."""

import random
from typing import Any, Callable, Optional

import numpy as np
from tqdm import trange

from ..CaseStudies.case_study import CaseStudy
from ..Enforcement.runtime_shield import RuntimeGridShield, shielded, pass_through
from ..Evaluation.metrics import clopper_pearson_ci
from ..Models.grid import Grid
from .data_structures import Trace, SafetyCheckResult


def simulate_trace(
    case_study: CaseStudy,
    mechanics,
    initial_state,
    policy: Callable[[np.ndarray], Any],
    steps: int,
    rng: random.Random,
) -> Trace:
    """Run ``policy`` for up to ``steps`` steps, stopping at the first unsafe state.

    Parameters
    ----------
    case_study : CaseStudy
        Dynamics and safety predicate
    mechanics
        Parameters passed to the case-study functions
    initial_state : array-like
        Starting state
    policy : callable
        ``policy(state) -> action``
    steps : int
        Maximum trace length
    rng : random.Random
        Source of disturbances

    Returns
    -------
    Trace
    """
    state = np.asarray(initial_state, dtype=np.float64)
    trace = Trace(states=[state])
    if not case_study.is_safe(mechanics, state):
        trace.safe = False
        return trace

    for _ in range(steps):
        action = policy(state)
        disturbance = case_study.sample_disturbance(mechanics, rng)
        state = np.asarray(case_study.simulate_point(mechanics, state, action, disturbance), dtype=np.float64)
        trace.actions.append(action)
        trace.states.append(state)
        if not case_study.is_safe(mechanics, state):
            trace.safe = False
            break
    return trace


def count_unsafe_traces(
    case_study: CaseStudy,
    agent: Callable[[Any, random.Random], Callable],
    runs: int,
    steps: int,
    seed: Optional[int] = None,
    mechanics=None,
    alpha: float = 0.05,
    verbose: bool = False,
) -> SafetyCheckResult:
    """Simulate ``runs`` traces and count the unsafe ones.

    Parameters
    ----------
    case_study : CaseStudy
        Dynamics and safety predicate
    agent : callable
        ``agent(mechanics, rng) -> policy``; called once and the policy is
        reused for every trace, e.g. ``case_study.random_agent`` or the
        result of ``shielded_agent``
    runs : int
        Number of traces
    steps : int
        Maximum length of each trace
    seed : int, optional
        Seed for the shared random number generator
    mechanics : optional
        Case-study parameters, defaults to ``case_study.make_mechanics()``
    alpha : float
        Significance level of the confidence interval on the unsafe rate
    verbose : bool
        Show a progress bar

    Returns
    -------
    SafetyCheckResult
    """
    if runs < 0 or steps < 0:
        raise ValueError(f"runs and steps must be non-negative, got runs={runs}, steps={steps}")
    if mechanics is None:
        mechanics = case_study.make_mechanics()
    rng = random.Random(seed)
    policy = agent(mechanics, rng)

    unsafe = 0
    unsafe_trace = None
    for _ in trange(runs, desc="Safety check", disable=not verbose):
        initial_state = case_study.initial_state(mechanics, rng)
        trace = simulate_trace(case_study, mechanics, initial_state, policy, steps, rng)
        if not trace.safe:
            unsafe += 1
            if unsafe_trace is None:
                unsafe_trace = trace

    ci_low, ci_high = clopper_pearson_ci(unsafe, runs, alpha)
    return SafetyCheckResult(
        unsafe=unsafe,
        total=runs,
        ci_low=ci_low,
        ci_high=ci_high,
        unsafe_trace=unsafe_trace,
    )


def shielded_agent(
    case_study: CaseStudy,
    shield: Grid,
    agent: Optional[Callable[[Any, random.Random], Callable]] = None,
    selection: str = "first",
) -> Callable[[Any, random.Random], Callable]:
    """Agent factory whose proposals are corrected by ``shield``.

    Defaults to the case study's random agent. Where the shield knows no
    safe action the proposal is kept, so the check counts those traces
    instead of aborting.
    """
    if agent is None:
        agent = case_study.random_agent

    def factory(mechanics, rng: random.Random):
        runtime_shield = RuntimeGridShield(
            shield, case_study.action_type, selection=selection, rng=rng, fallback=pass_through
        )
        return shielded(runtime_shield, agent(mechanics, rng))

    return factory
