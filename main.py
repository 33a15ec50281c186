# main.py
# Driver: generate a batch of Binairo puzzles → save JSON for the solver + PNG previews.

# ==================================================================
# CONFIGURATION: Easy Toggle
# ==================================================================
BATCH_SIZES = [6, 8, 10]      # Grid sizes to generate
PUZZLES_PER_SIZE = 2
REMOVAL_FRACTION = 0.6        # Share of cells left empty
SEED = None                   # Set an int for reproducible batches
JSON_DIR = "data/json"        # Where the solver looks for puzzles
OUTPUT_DIR = "data/debug"     # Preview images
SAVE_PREVIEWS = True
# ==================================================================

import os

from Binairo.generator import PuzzleGenerator
from Binairo.output import save_board_image


def ensure_dir(p):
    os.makedirs(p, exist_ok=True)


def generate_batch(sizes=BATCH_SIZES, per_size=PUZZLES_PER_SIZE,
                   removal_fraction=REMOVAL_FRACTION, seed=SEED,
                   json_dir=JSON_DIR, output_dir=OUTPUT_DIR,
                   save_previews=SAVE_PREVIEWS):
    """
    Generate puzzles for every size and write them to disk.

    Returns:
        {'success': [json paths], 'failed': [(name, reason)]}
    """
    ensure_dir(json_dir)
    if save_previews:
        ensure_dir(output_dir)

    generator = PuzzleGenerator(seed=seed, verbose=True)
    results = {'success': [], 'failed': []}

    for n in sizes:
        for k in range(1, per_size + 1):
            name = f"binairo_{n}x{n}_{k:02d}"
            print(f"\n{'='*70}")
            print(f"Generating {name}")
            print(f"{'='*70}")

            try:
                puzzle = generator.generate(n, removal_fraction)
            except ValueError as e:
                print(f"\n❌ ERROR: {e}")
                results['failed'].append((name, str(e)))
                continue

            if puzzle is None:
                results['failed'].append((name, "time limit on every attempt"))
                continue

            out_json = os.path.join(json_dir, f"{name}.json")
            puzzle.save(out_json)
            print(f"[output] JSON: {out_json}")

            if save_previews:
                out_png = os.path.join(output_dir, f"{name}.png")
                save_board_image(puzzle, out_png)

            results['success'].append(out_json)

    return results


if __name__ == "__main__":
    print("\n" + "="*70)
    print("BATCH GENERATION MODE")
    print("="*70)

    results = generate_batch()
    total = len(results['success']) + len(results['failed'])

    print("\n" + "="*70)
    print("BATCH GENERATION COMPLETE")
    print("="*70)
    print(f"\n✅ Successful: {len(results['success'])}/{total}")
    for path in results['success']:
        print(f"   - {path}")

    if results['failed']:
        print(f"\n❌ Failed: {len(results['failed'])}/{total}")
        for name, error in results['failed']:
            print(f"   - {name}: {error}")

    print(f"\nPuzzles saved to: {JSON_DIR}/")
