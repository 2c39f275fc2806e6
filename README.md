# scaladvisor

Building blocks for producing cluster scale-out advice. The package has no
dependencies outside the Python standard library.

## Modules

- `scaladvisor.pricing` holds instance price information.
  `get_instance_pricing_access(provider, path)` reads a JSON pricing file and
  `get_instance_pricing_from_data(provider, data)` reads JSON bytes or text;
  both return an `InstancePricing`. Its `get_info(region, instance_type)`
  returns an `InstancePriceInfo` and raises `PricingError` when there is no
  entry. `as_cloud_provider(name)` turns `"aws"`, `"gcp"`, `"azure"`, `"ali"`
  or `"openstack"` into a `CloudProvider` and raises `ValueError` otherwise.
- `scaladvisor.scorer` scores simulated node placements.
  `get_node_scorer(strategy, pricing, weights_fn)` returns a `LeastCost`
  scorer (weighted resource units scheduled per unit of hourly price) or a
  `LeastWaste` scorer (weighted allocatable of the scaled node minus the
  requests of pods placed because of it). `get_node_score_selector(strategy)`
  returns `select_max_allocatable` for least-cost and `select_min_price` for
  least-waste; each picks one winner from a list of `NodeScore`s, breaking
  ties at random, and raises `NoWinningNodeScoreError` on an empty list. An
  unknown strategy raises `UnsupportedScoringStrategyError`.
- `scaladvisor.simgroup` groups simulations by node-pool and node-template
  priority (`create_simulation_groups`, `sort_groups`). `SimulationGroup.run()`
  runs the simulations of a group in threads and collects their results,
  raising `SimulationGroupError` if any of them fails.
- `scaladvisor.generator` scores group results and selects winners
  (`compute_sim_group_scores`), runs groups in priority order until a winner
  leaves no pods unscheduled (`run_pass`), and builds a `ScaleOutPlan` with
  one `ScaleOutItem` per placement (`create_scale_out_plan`,
  `group_by_node_placement`).
- `scaladvisor.awsprice` downloads a region's public EC2 price list
  (`fetch_region_json`, raising `FetchError`) and reduces it to the lowest
  per-hour on-demand USD price of each shared-tenancy instance type for one
  operating system (`parse_region_prices`).
- `scaladvisor.operator_cli` parses operator launch options
  (`parse_launch_options` for `--config` and `-V/--version`) and checks that
  exactly one of them is given (`LaunchOptions.validate`, raising
  `OptionError`).

## Installation

```
pip install .
```

## Command line

The `scadctl` command generates a pricing file:

```
scadctl genprice ./pricing-data
scadctl genprice ./pricing-data -p aws -r us-east-1,eu-west-1
```

`-r/--regions` may be repeated or given as a comma-separated list; without it
a built-in list of AWS regions is used. The command writes
`aws_instance-type-infos.json` into the given directory, creating it if
needed. The file holds the lowest on-demand hourly Linux price of each
instance type in each region, sorted by instance type. Only `aws` is
supported as provider; other known providers are reported as not yet
implemented.

`scadctl genscenario` and `scadctl genscenario gardener <scenario-dir>` only
print a message; they generate no scenarios.

## Pricing file format

A JSON array of objects, for example:

```json
[
  {"instanceType": "m5.large", "region": "eu-west-1", "vcpu": 2,
   "memory": 8.0, "hourlyPrice": 0.107, "os": "Linux"}
]
```

## What this package does not do

- It runs no scaling advice service or server and no in-memory API server;
  simulations themselves are supplied by the caller, which passes objects
  with `run()` and `result()` to `scaladvisor.simgroup`.
- It has no operator: `scaladvisor.operator_cli` parses and checks launch
  options but does not load or validate an operator configuration file and
  runs no controllers.
- It does not generate scaling scenarios.

## Tests

```
pip install .[test]
pytest
```