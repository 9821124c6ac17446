import argparse
import logging
import os

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
from river import tree

from arff_stream import arff_nominal_attributes, arff_to_river_stream
from prequential_evaluation import prequential_evaluation
from window_ensemble import WindowReplacementEnsemble

logger = logging.getLogger(__name__)

DEFAULT_DATASETS = [
    "AGR_a.arff", "AGR_g.arff", "HYPER.arff", "LED_a.arff", "LED_g.arff",
    "RBF_f.arff", "RBF_m.arff", "RTG.arff", "SEA_a.arff", "SEA_g.arff"
]


def plot_windowed_accuracy(df_windows: pd.DataFrame, replacement_windows: list, title: str, output_file: str):
    """Plot windowed accuracy, marking the instances where a member was replaced."""
    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(df_windows["instances"], df_windows["accuracy"], marker=".", label="windowed accuracy")
    for i, position in enumerate(replacement_windows):
        ax.axvline(position, color="tab:red", alpha=0.2, label="replacement" if i == 0 else None)
    ax.set_xlabel("Instances")
    ax.set_ylabel("Accuracy")
    ax.set_ylim(0.0, 1.0)
    ax.set_title(title)
    ax.legend(loc="lower right")
    fig.tight_layout()
    fig.savefig(output_file)
    plt.close(fig)


def run_evaluation(arff_file_path: str, output_dir: str,
                   window_size: int = 1000, max_instances: int = None,
                   ensemble_size: int = 10, window_length: int = 1000,
                   seed: int = 42, progress_bar: bool = True) -> pd.DataFrame:
    """
    Run a prequential evaluation of the windowed replacement ensemble on a single
    ARFF file, save windowed metrics and a plot, and return cumulative metrics.

    Parameters:
    - arff_file_path: Path to the .arff data file.
    - output_dir: Directory where window CSV results and plots are written.
    - window_size: Size of the tumbling window for windowed metrics.
    - max_instances: Maximum number of instances to process (None for all).
    - ensemble_size: Number of voting members.
    - window_length: Instances between two candidate replacement decisions.
    - seed: Seed for candidate hyperparameter sampling.
    - progress_bar: Show progress bar if True.

    Returns:
    - DataFrame containing cumulative metrics for this stream.
    """
    logger.info("Processing stream: %s", arff_file_path)
    nominal_attrs = arff_nominal_attributes(arff_file_path)
    logger.info("Nominal attributes: %s", nominal_attrs)

    model = WindowReplacementEnsemble(
        model=tree.HoeffdingTreeClassifier(
            grace_period=50,
            delta=0.01,
            nominal_attributes=nominal_attrs or None,
            leaf_prediction="nba",
        ),
        ensemble_size=ensemble_size,
        window_length=window_length,
        seed=seed,
    )

    base_name = os.path.splitext(os.path.basename(arff_file_path))[0]
    results = prequential_evaluation(
        stream=arff_to_river_stream(arff_file_path),
        learner=model,
        window_size=window_size,
        max_instances=max_instances,
        progress_bar=progress_bar,
        stream_name=base_name,
    )

    model_name = type(model).__name__
    metrics = {
        "Learner": model_name,
        "Stream": base_name,
        "Instances": results.instances,
        "Wallclock Time (s)": results.wallclock,
        "CPU Time (s)": results.cpu_time,
        "Cumulative Accuracy": results.cumulative["accuracy"],
        "Cumulative Precision": results.cumulative["precision"],
        "Cumulative Recall": results.cumulative["recall"],
        "Cumulative Kappa": results.cumulative["kappa"],
        "Replacements": model.n_replacements,
        "Windows": len(model.replacement_history),
    }
    df_metrics = pd.DataFrame([metrics])

    df_windows = results.metrics_per_window()
    windows_csv = os.path.join(output_dir, f"windows_{model_name}_{base_name}.csv")
    df_windows.to_csv(windows_csv, index=False)
    logger.info("Saved windowed metrics to %s", windows_csv)

    replacement_positions = [
        report.window * window_length for report in model.replacement_history if report.replaced
    ]
    plot_file = os.path.join(output_dir, f"windows_{model_name}_{base_name}.png")
    plot_windowed_accuracy(df_windows, replacement_positions, f"{model_name} on {base_name}", plot_file)
    logger.info("Saved windowed accuracy plot to %s", plot_file)

    return df_metrics


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Prequential benchmark of the windowed replacement ensemble on ARFF streams."
    )
    parser.add_argument("datasets", nargs="*", default=DEFAULT_DATASETS,
                        help="ARFF file names inside --data-dir")
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--output-dir", default="./results")
    parser.add_argument("--window-size", type=int, default=1000,
                        help="tumbling window for windowed metrics")
    parser.add_argument("--ensemble-size", type=int, default=10)
    parser.add_argument("--window-length", type=int, default=1000,
                        help="instances between two replacement decisions")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--max-instances", type=int, default=None)
    parser.add_argument("--no-progress", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    os.makedirs(args.output_dir, exist_ok=True)

    all_metrics: list[pd.DataFrame] = []
    for fname in args.datasets:
        file_path = os.path.join(args.data_dir, fname)
        if not os.path.isfile(file_path):
            logger.warning("File not found: %s", file_path)
            continue
        df = run_evaluation(
            file_path,
            args.output_dir,
            window_size=args.window_size,
            max_instances=args.max_instances,
            ensemble_size=args.ensemble_size,
            window_length=args.window_length,
            seed=args.seed,
            progress_bar=not args.no_progress,
        )
        all_metrics.append(df)

    # Combine all cumulative metrics into one CSV
    if not all_metrics:
        logger.warning("No metrics to combine.")
        return None
    all_df = pd.concat(all_metrics, ignore_index=True)
    model_name = all_df.at[0, "Learner"]
    combined_csv = os.path.join(args.output_dir, f"metrics_{model_name}_all_streams.csv")
    all_df.to_csv(combined_csv, index=False)
    logger.info("Saved combined cumulative metrics to %s", combined_csv)
    return all_df


if __name__ == "__main__":
    main()
