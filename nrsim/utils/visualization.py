"""
Visualization utilities for 5G NR scenarios.

This module plots the spectrum plan and the aggregated flow KPIs of a run.
"""

import logging
import math
import os

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from ..planning.planner import ScenarioPlan
from ..stats.aggregator import AggregationResult

logger = logging.getLogger(__name__)


class KPIVisualizer:
    """Static plots of scenario plans and flow KPIs."""

    def __init__(self, style: str = 'seaborn-v0_8'):
        try:
            plt.style.use(style)
        except OSError:
            # Fallback to default if seaborn style not available
            plt.style.use('default')

    def create_comprehensive_report(self, result: AggregationResult, plan: ScenarioPlan = None,
                                    output_dir: str = "./results/"):
        """Create all plots for a run."""
        os.makedirs(output_dir, exist_ok=True)
        self.plot_flow_kpis(result, output_dir)
        if plan is not None:
            self.plot_spectrum_plan(plan, output_dir)

        logger.info(f"Visualization report created in {output_dir}")

    def plot_flow_kpis(self, result: AggregationResult, output_dir: str) -> str:
        """Plot per-flow throughput, delay and loss with the network summary."""
        df = result.to_dataframe()
        fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2, figsize=(15, 10))

        if not df.empty:
            df['flow'] = df['flow_id'].astype(str)
            sns.barplot(data=df, x='flow', y='throughput_mbps', ax=ax1, color='steelblue')
            ax1.set_title('Throughput per Flow')
            ax1.set_xlabel('Flow')
            ax1.set_ylabel('Throughput (Mbps)')

            sns.barplot(data=df, x='flow', y='mean_delay_ms', ax=ax2, color='orange')
            ax2.set_title('Mean Delay per Flow')
            ax2.set_xlabel('Flow')
            ax2.set_ylabel('Delay (ms)')

            sns.barplot(data=df, x='flow', y='loss_rate_percent', ax=ax3, color='red')
            ax3.set_title('Packet Loss Rate per Flow')
            ax3.set_xlabel('Flow')
            ax3.set_ylabel('Loss (%)')
            ax3.set_ylim(0, 100)

        network = result.network
        summary = [
            ('Mean throughput', network.mean_throughput_mbps, 'Mbps'),
            ('Mean delay', network.mean_delay_ms, 'ms'),
            ('Packet loss rate', network.packet_loss_rate_percent, '%'),
            ('Fairness index', network.fairness_index, ''),
        ]
        ax4.axis('off')
        for i, (label, value, unit) in enumerate(summary):
            text = "n/a" if math.isnan(value) else f"{value:.3f} {unit}"
            ax4.text(0.05, 0.85 - i * 0.2, f"{label}: {text}", fontsize=13, transform=ax4.transAxes)
        ax4.set_title(f'Network Summary ({network.contributing_flows} of {network.total_flows} flows)')

        plt.suptitle('Flow Performance', fontsize=16, fontweight='bold')
        plt.tight_layout()
        output_file = os.path.join(output_dir, "flow_kpis.png")
        plt.savefig(output_file, dpi=300, bbox_inches='tight')
        plt.close()
        return output_file

    def plot_spectrum_plan(self, plan: ScenarioPlan, output_dir: str) -> str:
        """Plot band shares and per-cell transmit power per band."""
        bands = plan.spectrum.bands
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

        x = np.arange(len(bands))
        labels = [f'Band {b.band_index}\n{b.center_frequency / 1e9:g} GHz, μ{b.numerology}' for b in bands]

        ax1.bar(x, [b.band_share for b in bands], alpha=0.8, edgecolor='black')
        ax1.set_title('Bandwidth Share per Band')
        ax1.set_ylabel('Share')
        ax1.set_ylim(0, 1)
        ax1.set_xticks(x)
        ax1.set_xticklabels(labels)

        ax2.bar(x, [b.tx_power for b in bands], alpha=0.8, color='orange', edgecolor='black')
        ax2.set_title('Transmit Power per Band (every cell)')
        ax2.set_ylabel('Tx Power (dBm)')
        ax2.set_xticks(x)
        ax2.set_xticklabels(labels)

        plt.tight_layout()
        output_file = os.path.join(output_dir, "spectrum_plan.png")
        plt.savefig(output_file, dpi=300, bbox_inches='tight')
        plt.close()
        return output_file
