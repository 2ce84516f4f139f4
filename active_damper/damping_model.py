"""
Damping Model Catalog
=====================
Nonlinear damping coefficients γ(y, v) for the active shock absorber.

Each variant is a total function over all real (y, v):
- exp_y    : 1 - exp(-10 y²)   damping grows with displacement, saturating near 1
- exp_v    : 1 - exp(-10 v²)   damping grows with speed
- vdp      : 0.5 (y² - 1)      Van der Pol style, negative (energy injecting)
                               for |y| < 1, positive outside
- constant : 0.2               linear damping, baseline reference case

The coefficient is never clamped: negative values model active damping.
"""

from enum import Enum

import numpy as np


class ConfigurationError(ValueError):
    """Invalid simulation input, raised before any integration starts."""


class DampingVariant(str, Enum):
    """Closed set of damping laws."""
    EXP_Y = 'exp_y'
    EXP_V = 'exp_v'
    VDP = 'vdp'
    CONSTANT = 'constant'


# ══════════════════════════════════════════════════════════════════════════
#  Variant metadata — label, plot styling
# ══════════════════════════════════════════════════════════════════════════

EXP_Y_DATA = {
    'name': 'Position Exponential',
    'label': '1 - exp(-10 y²)',
    'color': '#00d4ff',
    'linestyle': '-',
}

EXP_V_DATA = {
    'name': 'Velocity Exponential',
    'label': "1 - exp(-10 y'²)",
    'color': '#ff6b35',
    'linestyle': '--',
}

VDP_DATA = {
    'name': 'Van der Pol',
    'label': '0.5 (y² - 1)',
    'color': '#e040fb',
    'linestyle': '-.',
}

CONSTANT_DATA = {
    'name': 'Constant',
    'label': '0.2',
    'color': '#00e676',
    'linestyle': ':',
}

ALL_VARIANTS = {
    DampingVariant.EXP_Y: EXP_Y_DATA,
    DampingVariant.EXP_V: EXP_V_DATA,
    DampingVariant.VDP: VDP_DATA,
    DampingVariant.CONSTANT: CONSTANT_DATA,
}

CONSTANT_GAMMA = 0.2


def _gamma_exp_y(y, v):
    return 1.0 - np.exp(-10.0 * y * y)


def _gamma_exp_v(y, v):
    return 1.0 - np.exp(-10.0 * v * v)


def _gamma_vdp(y, v):
    return 0.5 * (y * y - 1.0)


def _gamma_constant(y, v):
    return np.full(np.broadcast(y, v).shape, CONSTANT_GAMMA)


_GAMMA_FUNCTIONS = {
    DampingVariant.EXP_Y: _gamma_exp_y,
    DampingVariant.EXP_V: _gamma_exp_v,
    DampingVariant.VDP: _gamma_vdp,
    DampingVariant.CONSTANT: _gamma_constant,
}


def resolve_variant(variant) -> DampingVariant:
    """Map a tag or enum member onto the catalog, failing on anything else."""
    if isinstance(variant, DampingVariant):
        return variant
    try:
        return DampingVariant(variant)
    except ValueError:
        raise ConfigurationError(
            f"Unknown damping variant {variant!r}. "
            f"Available: {[v.value for v in DampingVariant]}"
        ) from None


class DampingModel:
    """
    Damping coefficient γ(y, v) for one catalog variant.

    Stateless: identical inputs always give identical output, so a model
    can be shared between runs and used as part of a memoization key.
    """

    def __init__(self, variant='exp_y'):
        """
        Parameters
        ----------
        variant : DampingVariant or str
            One of 'exp_y', 'exp_v', 'vdp', 'constant'
        """
        self.variant = resolve_variant(variant)

        data = ALL_VARIANTS[self.variant]
        self.name = data['name']
        self.label = data['label']
        self.color = data['color']
        self.linestyle = data['linestyle']
        self._fn = _GAMMA_FUNCTIONS[self.variant]

    def gamma(self, y: float, v: float) -> float:
        """Return the damping coefficient at state (y, v)."""
        return float(self._fn(y, v))

    def gamma_array(self, y: np.ndarray, v: np.ndarray) -> np.ndarray:
        """Vectorized γ lookup."""
        return np.asarray(self._fn(np.asarray(y, dtype=float),
                                   np.asarray(v, dtype=float)), dtype=float)

    def __call__(self, y: float, v: float) -> float:
        return self.gamma(y, v)

    def __eq__(self, other):
        return isinstance(other, DampingModel) and other.variant == self.variant

    def __hash__(self):
        return hash(self.variant)

    def __repr__(self):
        return f"DampingModel({self.variant.value!r})"


def damping_force(y: float, v: float, model) -> float:
    """
    Damping force F_damp = -γ(y, v) · v  (N).

    `model` is any callable (y, v) -> γ, usually a DampingModel.
    Positive γ opposes motion; negative γ pushes along it.
    """
    return -model(y, v) * v


if __name__ == "__main__":
    import matplotlib.pyplot as plt

    print("Damping Model — γ(y, 0) and γ(0, v) for all variants")
    print("=" * 50)

    s = np.linspace(-1.5, 1.5, 500)
    zeros = np.zeros_like(s)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))
    for variant, data in ALL_VARIANTS.items():
        model = DampingModel(variant)
        ax1.plot(s, model.gamma_array(s, zeros), label=data['label'],
                 color=data['color'], linestyle=data['linestyle'], linewidth=2)
        ax2.plot(s, model.gamma_array(zeros, s), label=data['label'],
                 color=data['color'], linestyle=data['linestyle'], linewidth=2)

    ax1.set_xlabel('Position y')
    ax2.set_xlabel("Velocity y'")
    ax1.set_ylabel('γ')
    for ax in (ax1, ax2):
        ax.axhline(y=0, color='#888', linewidth=0.5)
        ax.legend()
        ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig('outputs/damping_curves.png', dpi=150)
    print("Saved: outputs/damping_curves.png")
