"""Smoke tests for the debugging plot"""

import matplotlib.pyplot as plt

from thermalhouse.post.plot import plot_field


def test_plot_field_draws_into_given_axes(field):
    fig, ax = plt.subplots()
    returned = plot_field(field, ax=ax, show=False)
    assert returned is ax
    assert len(ax.images) == 1
    assert len(ax.patches) == 1
    plt.close(fig)


def test_plot_field_creates_figure(field):
    ax = plot_field(field, show=False)
    assert ax.get_title() == "Thermal field"
    plt.close(ax.figure)
