#!/usr/bin/env python3
"""
Brainfuck machine benchmark runner.
Times the bundled programs under benchmark/scripts and records throughput and memory.
"""

import json
import os
import statistics
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

import psutil

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from haifa_bf.loader import load
from haifa_bf.machine import Machine
from haifa_bf.streams import BytesInput, BytesOutput


class BFBenchmarkRunner:
    def __init__(self, benchmark_dir: str = "benchmark"):
        self.benchmark_dir = Path(benchmark_dir)
        self.results_dir = self.benchmark_dir / "results"
        self.scripts_dir = self.benchmark_dir / "scripts"
        self.results_dir.mkdir(parents=True, exist_ok=True)
        self.process = psutil.Process(os.getpid())

    def discover_scripts(self) -> List[Path]:
        return sorted(self.scripts_dir.glob("*.b"))

    def run_script(self, script_path: Path) -> Dict:
        """Run one program once and return timing, step and memory figures."""
        source = script_path.read_text(encoding="utf-8")
        input_path = script_path.with_suffix(".in")
        input_data = input_path.read_bytes() if input_path.exists() else b""

        rss_before = self.process.memory_info().rss
        start_time = time.perf_counter()
        program = load(source)
        load_time = time.perf_counter() - start_time

        output = BytesOutput()
        machine = Machine(program, BytesInput(input_data), output)
        machine.run()
        total_time = time.perf_counter() - start_time
        rss_after = self.process.memory_info().rss

        return {
            "load_time": load_time,
            "total_time": total_time,
            "steps": machine.step_count,
            "tape_length": len(machine.tape),
            "rss_delta": rss_after - rss_before,
            "output": output.getvalue().decode("latin-1"),
        }

    def run_benchmark_suite(self, iterations: int = 3) -> Dict:
        results = {
            "test_info": {
                "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
                "iterations": iterations,
                "python_version": sys.version,
                "system_info": {
                    "platform": sys.platform,
                    "cpu_count": psutil.cpu_count(),
                    "total_memory": psutil.virtual_memory().total,
                },
            },
            "tests": {},
        }

        for script_path in self.discover_scripts():
            print(f"\nRunning {script_path.name}...")
            runs = []
            for i in range(iterations):
                print(f"  Iteration {i + 1}/{iterations}")
                runs.append(self.run_script(script_path))

            times = [run["total_time"] for run in runs]
            steps = runs[0]["steps"]
            avg_time = statistics.mean(times)
            results["tests"][script_path.name] = {
                "times": times,
                "avg_time": avg_time,
                "min_time": min(times),
                "max_time": max(times),
                "std_dev": statistics.stdev(times) if len(times) > 1 else 0,
                "steps": steps,
                "steps_per_second": steps / avg_time if avg_time > 0 else 0,
                "max_rss_delta": max(run["rss_delta"] for run in runs),
                "sample_output": runs[0]["output"],
            }
        return results

    def save_results(self, results: Dict, filename: Optional[str] = None) -> Path:
        if filename is None:
            timestamp = time.strftime("%Y%m%d_%H%M%S")
            filename = f"benchmark_results_{timestamp}.json"

        result_path = self.results_dir / filename
        with open(result_path, "w", encoding="utf-8") as f:
            json.dump(results, f, indent=2, ensure_ascii=False)

        print(f"\nResults saved to: {result_path}")
        return result_path

    def print_summary(self, results: Dict) -> None:
        print("\n" + "=" * 60)
        print("PERFORMANCE BENCHMARK SUMMARY")
        print("=" * 60)
        test_info = results.get("test_info", {})
        print(f"Test Time: {test_info.get('timestamp')}")
        print(f"Iterations: {test_info.get('iterations')}")
        print()
        print(f"{'Test':<20} {'Avg (s)':<12} {'Steps':<12} {'Steps/s':<14} {'RSS delta':<10}")
        print("-" * 70)
        for test_name, data in results.get("tests", {}).items():
            print(
                f"{test_name:<20} {data['avg_time']:<12.4f} {data['steps']:<12} "
                f"{data['steps_per_second']:<14.0f} {data['max_rss_delta']:<10}"
            )


def main(argv: Optional[List[str]] = None):
    import argparse

    parser = argparse.ArgumentParser(description="Brainfuck machine performance benchmark")
    parser.add_argument("-i", "--iterations", type=int, default=3, help="Iterations per program (default: 3)")
    parser.add_argument("-o", "--output", type=str, help="Result file name")
    parser.add_argument(
        "--benchmark-dir",
        type=str,
        default=str(Path(__file__).resolve().parent),
        help="Benchmark directory (default: this script's directory)",
    )
    args = parser.parse_args(argv)
    if args.iterations < 1:
        parser.error("--iterations must be at least 1")

    runner = BFBenchmarkRunner(args.benchmark_dir)
    print("Starting Brainfuck machine benchmark...")
    print(f"Iterations per test: {args.iterations}")

    results = runner.run_benchmark_suite(iterations=args.iterations)
    runner.save_results(results, args.output)
    runner.print_summary(results)


if __name__ == "__main__":
    main()
