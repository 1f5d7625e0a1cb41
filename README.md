# mnistsearch

Approximate nearest-neighbour search over image sets stored in the MNIST
IDX format. Four methods are available, and every command compares its
answers with an exact brute-force search:

- **LSH**: locality-sensitive hashing with `L` hash tables, each keyed by
  `k` random projections `h(p) = floor((p · v + t) / w)`.
- **Hypercube**: random projection of every image onto a vertex of
  `{0,1}^k`, probing neighbouring vertices in order of Hamming distance.
- **GNNS**: greedy search with random restarts over a nearest-neighbour
  graph whose edges are found with LSH.
- **MRNG**: search over a monotonic relative neighbourhood graph, starting
  from the image nearest to the centroid of the data set.

Distances are Euclidean throughout.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Input files

The data set and the query file are both IDX image files: a header of four
big-endian 32-bit integers (magic number, number of images, rows, columns)
followed by one unsigned byte per pixel. Each run takes up to the first ten
images of the query file as queries. A missing or truncated file is
reported as `open: ...` on standard error and the command exits with
status 1.

Images at distance zero from a query are never reported as its neighbours,
by either the approximate or the exact search.

## Commands

Options not listed below are ignored. Numeric options are read like C's
`atoi`: leading digits are used and anything else reads as 0. If `-d`,
`-q` or `-o` is missing, the command prints a message and exits with
status 1.

### LSH

```
mnist-lsh -d train-images.idx3-ubyte -q t10k-images.idx3-ubyte -o lsh.txt -k 4 -L 5 -N 1 -R 10000
```

| option | meaning | default |
|--------|---------|---------|
| `-d` | data set file | required |
| `-q` | query file | required |
| `-o` | output file | required |
| `-k` | number of `h` functions per hash table | 4 |
| `-L` | number of hash tables | 5 |
| `-N` | number of nearest neighbours | 1 |
| `-R` | radius for range search | 10000 |

The data set must hold at least 8 images (there are `images / 8` buckets
per table). For every query the output file holds `Query: i`, then for each
rank `Nearest neighbor-i` with the approximate id, `distanceLSH` and
`distanceTrue`, then the times `tLSH` and `tTrue`, then under
`R-near neighbors:` the ids of every LSH candidate within radius `R`,
closed by a line of underscores. A rank the approximate search did not fill
shows id `-1` and distance `inf`.

### Hypercube

```
mnist-cube -d train-images.idx3-ubyte -q t10k-images.idx3-ubyte -o cube.txt -k 14 -M 10 --probes 2 -N 1 -R 10000
```

| option | meaning | default |
|--------|---------|---------|
| `-d` | data set file | required |
| `-q` | query file | required |
| `-o` | output file | required |
| `-k` | cube dimension | 4 |
| `-M` | probing stops once at least this many images are gathered | 10 |
| `-p`, `--probes` | probing stops once this many non-empty vertices are found | 2 |
| `-N` | number of nearest neighbours | 1 |
| `-R` | radius for range search | 10000 |

Candidates are taken from the query's own vertex and from the probed
vertices except the last one found. The output has the same shape as for
LSH, with `distanceCube` and `tCube`.

### Graph search (GNNS and MRNG)

```
mnist-graph-search -d train-images.idx3-ubyte -q t10k-images.idx3-ubyte -o graph.txt -m 1 -k 50 -E 30 -R 1 -N 1
mnist-graph-search -d train-images.idx3-ubyte -q t10k-images.idx3-ubyte -o graph.txt -m 2 -l 20 -N 1
```

| option | meaning | default |
|--------|---------|---------|
| `-d` | data set file | required |
| `-q` | query file | required |
| `-o` | output file | required |
| `-m` | method: `1` GNNS, `2` MRNG | required |
| `-k` | neighbours per node in the GNNS graph | 50 |
| `-E` | neighbours expanded per greedy step (GNNS) | 30 |
| `-R` | random restarts (GNNS) | 1 |
| `-N` | number of nearest neighbours | 1 |
| `-l` | number of candidates gathered (MRNG) | 20 |

Without `-m` the command prints a message and exits with status 1. `E` is
capped at `k` and `l` is raised to at least `N`, with a notice on standard
output. GNNS walks at most 50 greedy steps per restart.

For every query the output holds `Query i:` and, for each rank,
`Nearest neighbor-i`, `distanceGKNN` or `distanceMRNG`, and `distanceTrue`.
After the queries come `tAverageApproximate` and `tAverageTrue` (seconds),
`MAF` (the smallest ratio of approximate to true nearest distance over the
queries) and `MAF Average`. The command then asks for another query file on
standard input; answering `No`, or closing the input, stops it. Reports for
further query files are appended to the same output file.

Building either graph compares many pairs of images, so start with a small
data set.

## Library use

- `mnistsearch.dataset`: IDX reading (`read_meta`, `read_image`,
  `load_images`, `read_labels`), `reverse_int`, and the distance helpers
  `p_norm` and `dot_prod`.
- `mnistsearch.method`: the `Point` result type (`dist`, `id`), the shared
  `Method` base with `nearest_search(n)` and `range_search(radius)`, and
  `brute_nearest(images, query, n, metric)` for exact search.
- `mnistsearch.lsh.LSH` and `mnistsearch.hypercube.Cube` (with
  `bin_to_dec`): hash-based indexes; call `query` and then
  `nearest_search` or `range_search`.
- `mnistsearch.gnns.GNNS` and `mnistsearch.mrng.MRNG` (with its
  `Candidate` type): graph indexes built on `mnistsearch.graph_index.GraphIndex`;
  call `query` and then `nearest_search`.

Every index takes an optional `numpy.random.Generator` as `rng`; pass a
seeded one for reproducible results. The commands use an unseeded
generator, so their answers differ from run to run.

## What it does not do

The package searches for neighbours only. It does not cluster images, it
does not use labels beyond reading them with `read_labels`, and it does not
save a built index: every command rebuilds its index from the data set on
each run.