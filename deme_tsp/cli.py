import argparse
import json
import time
from dataclasses import asdict, replace
from pathlib import Path
from typing import Dict, Optional

from deme_tsp.data import load_instance, load_instances
from deme_tsp.evolutionary import GAConfig, GeneticSearch
from deme_tsp.population import Population


CHECKPOINT_PATH = Path("checkpoints/search_state.json")


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def to_state(search: GeneticSearch, source: str) -> Dict:
    return {
        "cfg": asdict(search.cfg),
        "source": source,
        "best": {
            "order": search.best_order,
            "length": search.best_length,
            "generation": search.best_generation,
        },
        **search.population.to_state(),
    }


def save_checkpoint(search: GeneticSearch, source: str, path: Path = CHECKPOINT_PATH) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(to_state(search, source), indent=2))


def load_checkpoint(cities, path: Path = CHECKPOINT_PATH, source: Optional[str] = None) -> GeneticSearch:
    state = json.loads(path.read_text())
    if source is not None and state.get("source") != source:
        raise ValueError(f"Checkpoint {path} was written for {state.get('source')}, not {source}.")
    stored = len(state["best"]["order"])
    if stored != cities.size():
        raise ValueError(f"Checkpoint {path} holds tours over {stored} cities, got {cities.size()}.")
    cfg = GAConfig(**state["cfg"])
    population = Population.from_state(state, cities, seed=cfg.random_seed + state.get("generation", 0))
    search = GeneticSearch(cfg, cities, population=population)
    # Lengths are recomputed so the stored best is judged by the current city set.
    best_order = list(state["best"]["order"])
    best_length = cities.total_path_distance(best_order)
    if best_length < search.best_length:
        search.best_order = best_order
        search.best_length = best_length
        search.best_generation = state["best"]["generation"]
    return search


def _config_from_args(args) -> GAConfig:
    return GAConfig(
        population_size=args.pop_size,
        mutation_rate=args.mutation_rate,
        generations=args.generations,
        random_seed=args.seed,
    )


def run(args) -> None:
    t0 = time.perf_counter()
    path = Path(args.cities)
    source = str(path.resolve())
    log(f"loading cities from {path}")
    instance = load_instance(path)
    cities = instance.cities
    log(f"loaded {cities.size()} cities in {time.perf_counter() - t0:.2f}s")
    if cities.size() < 2:
        raise ValueError(f"Need at least two cities to build a tour, got {cities.size()}.")

    checkpoint = Path(args.checkpoint)
    cfg = _config_from_args(args)
    if args.resume and checkpoint.exists():
        log(f"resuming from {checkpoint}")
        search = load_checkpoint(cities, checkpoint, source=source)
        search.cfg = replace(search.cfg, generations=cfg.generations)
        overridden = {k: v for k, v in asdict(search.cfg).items() if v != getattr(cfg, k)}
        if overridden:
            log(f"checkpoint config overrides flags: {overridden}")
    else:
        search = GeneticSearch(cfg, cities)
    log(f"generation {search.generation}: start length={search.best_length:.4f}")

    def report(generation: int, length: float) -> None:
        print(f"{generation}\t{length}", flush=True)

    try:
        search.run(cfg.generations, on_improve=report)
    except KeyboardInterrupt:
        log("interrupted")
    result = search.result(optimum=instance.optimum)
    elapsed = time.perf_counter() - t0
    log(f"best length={result.length:.4f} found at generation {result.generation} ({elapsed:.2f}s)")
    if result.optimum is not None:
        log(f"known optimum={result.optimum:.4f} gap={result.gap:.2%}")

    save_checkpoint(search, source, checkpoint)
    log(f"checkpoint saved to {checkpoint}")
    if cities.coords is not None:
        out = Path(args.output)
        cities.reorder(result.order).save(out)
        log(f"tour written to {out}")


def bench(args) -> None:
    data_root = Path(args.data_root)
    log(f"loading data from {data_root}")
    instances = load_instances(data_root, max_nodes=args.max_nodes, max_instances=args.max_instances)
    if not instances:
        raise RuntimeError(f"No TSPLIB instances found in {data_root}. Place .tsp (and optional .opt.tour) files there.")
    cfg = _config_from_args(args)
    for inst in instances:
        t0 = time.perf_counter()
        search = GeneticSearch(cfg, inst.cities)
        result = search.run()
        result.optimum = inst.optimum
        gap = "n/a" if inst.optimum is None else f"{result.gap:.2%}"
        log(
            f"{inst.name}: n={inst.cities.size()} length={result.length:.2f} "
            f"gap={gap} time={time.perf_counter() - t0:.2f}s"
        )


def show(args) -> None:
    path = Path(args.checkpoint)
    if not path.exists():
        print(f"No checkpoint found at {path}; run `deme-tsp run` first.")
        return
    state = json.loads(path.read_text())
    best = state["best"]
    print(f"source={state['source']} generation={state['generation']} cfg={state['cfg']}")
    print(f"best length={best['length']:.4f} (generation {best['generation']})")
    print(" ".join(str(i) for i in best["order"]))


def _add_ga_args(parser: argparse.ArgumentParser) -> None:
    defaults = GAConfig()
    parser.add_argument("--generations", type=int, default=defaults.generations)
    parser.add_argument("--pop-size", type=int, default=defaults.population_size)
    parser.add_argument("--mutation-rate", type=float, default=defaults.mutation_rate)
    parser.add_argument("--seed", type=int, default=defaults.random_seed)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Genetic algorithm for the travelling-salesperson problem")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Evolve a tour for one city file (.tsp or x/y table)")
    run_parser.add_argument("cities")
    _add_ga_args(run_parser)
    run_parser.add_argument("--output", default="shortest.tsv")
    run_parser.add_argument("--checkpoint", default=str(CHECKPOINT_PATH))
    run_parser.add_argument("--resume", action="store_true")
    run_parser.set_defaults(func=run)

    bench_parser = subparsers.add_parser("bench", help="Run on every TSPLIB instance in a directory")
    bench_parser.add_argument("--data-root", default="data/tsplib")
    bench_parser.add_argument("--max-nodes", type=int, default=None)
    bench_parser.add_argument("--max-instances", type=int, default=None)
    _add_ga_args(bench_parser)
    bench_parser.set_defaults(func=bench)

    show_parser = subparsers.add_parser("show", help="Inspect a saved checkpoint")
    show_parser.add_argument("checkpoint", nargs="?", default=str(CHECKPOINT_PATH))
    show_parser.set_defaults(func=show)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
