"""Chart generation for load test plans."""

import matplotlib.pyplot as plt
from datetime import datetime
from typing import List, Optional, Tuple

from ..core.models import InvocationType, Job, Phase, PhaseKind


def phase_rate_points(phases: List[Phase], offset: float = 0) -> Tuple[List[float], List[float]]:
    """
    Arrival rate curve of a phase list.

    Args:
        phases: Phases to trace
        offset: Time in seconds at which the first phase starts

    Returns:
        Tuple of (seconds, requests per second) points
    """
    times: List[float] = []
    rates: List[float] = []
    t = offset
    for phase in phases:
        kind = phase.kind
        if kind is PhaseKind.PAUSE:
            start_rate, end_rate, duration = 0, 0, phase.pause
        elif kind is PhaseKind.COUNTED:
            rate = phase.arrival_count / phase.duration
            start_rate, end_rate, duration = rate, rate, phase.duration
        elif kind is PhaseKind.RAMP:
            start_rate, end_rate, duration = phase.arrival_rate, phase.ramp_to, phase.duration
        elif kind is PhaseKind.CONSTANT:
            start_rate, end_rate, duration = phase.arrival_rate, phase.arrival_rate, phase.duration
        else:
            continue
        times.extend([t, t + duration])
        rates.extend([start_rate, end_rate])
        t += duration
    return times, rates


def generate_schedule_chart(
    jobs: List[Job],
    output_path: Optional[str] = None,
    show: bool = True,
) -> Optional[str]:
    """
    Chart the arrival rate each job contributes over time.

    Args:
        jobs: Planned jobs
        output_path: Path to save the chart (auto-generated if None)
        show: Whether to display the chart

    Returns:
        Path to saved chart file, or None if there was nothing to chart
    """
    if not jobs:
        print("No jobs to chart.")
        return None

    origin = min(job.start for job in jobs)

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(15, 10))
    fig.suptitle("Load Test Plan", fontsize=16, fontweight="bold")

    # Arrival rate per job
    for index, job in enumerate(jobs):
        times, rates = phase_rate_points(list(job.script.phases), (job.start - origin) / 1000)
        ax1.plot(
            times,
            rates,
            linestyle="--" if job.invocation is InvocationType.EVENT else "-",
            linewidth=2,
            label=f"Job {index} ({job.invocation.value})",
        )
    ax1.set_xlabel("Seconds since first start")
    ax1.set_ylabel("Arrival rate (requests/second)")
    ax1.set_title("Arrival Rate per Job")
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    # Job timeline
    for index, job in enumerate(jobs):
        times, _ = phase_rate_points(list(job.script.phases), (job.start - origin) / 1000)
        if times:
            ax2.barh(index, times[-1] - times[0], left=times[0], alpha=0.6)
    ax2.set_xlabel("Seconds since first start")
    ax2.set_ylabel("Job")
    ax2.set_title("Job Timeline")
    ax2.invert_yaxis()
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        saved_path = output_path
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        saved_path = f"load_plan_{timestamp}.png"

    plt.savefig(saved_path, dpi=150, bbox_inches="tight")
    print(f"\nChart saved as: {saved_path}")

    if show:
        plt.show()
    plt.close(fig)

    return saved_path
