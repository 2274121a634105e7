from pathlib import Path

HAS_MPL = False
try:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    HAS_MPL = True
except ImportError:
    HAS_MPL = False


def plot_sampling(outdir: Path, name: str, trace, target: float | None = None) -> Path | None:
    if not HAS_MPL or not trace.samples:
        return None
    outdir.mkdir(parents=True, exist_ok=True)

    D_mm = [s.D * 1e3 for s in trace.samples]
    t = [s.t for s in trace.samples]
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.loglog(D_mm, t, "o-", lw=2, label="forward model")
    if target is not None:
        ax.axhline(target, color="k", ls="--", lw=1, label=f"target {target:g} s")
    ax.set(xlabel="D, mm", ylabel="t, s", title=f"{name}: transfer time vs diameter")
    ax.grid(True, which="both", alpha=0.3)
    ax.legend()
    fig.tight_layout()
    path = outdir / f"{name}_sampling.png"
    fig.savefig(path, dpi=200)
    plt.close(fig)
    return path
