"""Shared fixtures: a small data set covering every scenario kind."""

import gzip

import pytest


def write_inputs(data_dir):
    """Create a small data set covering every scenario kind."""
    data_dir.mkdir(parents=True, exist_ok=True)

    (data_dir / "known.txt").write_text("1\t5@6\n2\t5\n3\t6@7\n")
    (data_dir / "first.pr.txt").write_text(
        "OG\t5\t6\t7\n"
        "COG0001\t0.9\t0.1\tNA\n"
        "COG0002\t0.8\t0.2\t0.1\n"
        "COG0003\t0.1\t0.2\t0.9\n"
    )
    (data_dir / "second.pr.txt").write_text(
        "OG\t5\t6\t7\n"
        "COG0001\t0.1\t0.9\t0.2\n"
        "COG0002\t0.75\t0.1\t0.1\n"
        "COG0003\t0.1\t0.1\t0.8\n"
    )
    (data_dir / "allow.txt").write_text("5\n7\n")

    (data_dir / "network_known.txt").write_text("1\t9401\n2\t6094\n3\t9401@6094\n4\t9401\n")
    (data_dir / "correlations.txt").write_text(
        "Gene family pair\tMPP\tPP\n"
        "COG0001-COG0002\t0.8\t0.6\n"
        "COG0002-COG0003\t0.3\t0.75\n"
        "COG0001-COG0004\t0.2\t0.1\n"
    )
    (data_dir / "mpp.csv").write_text(
        "OG,f1,f2,f3,f4\n"
        "COG0001,1,2,3,4\n"
        "COG0002,2,4,6,8\n"
        "COG0003,4,3,2,1\n"
        "COG0004,1,0,1,0\n"
    )
    (data_dir / "pp.csv").write_text(
        "OG,g1,g2,g3\n"
        "COG0001,0,1,1\n"
        "COG0002,1,1,0\n"
        "COG0003,0,1,1\n"
        "COG0004,1,0,0\n"
    )

    with gzip.open(data_dir / "go.obo-xml.gz", "wt") as f:
        f.write(
            "<term>\n<id>GO:0000005</id>\n<subset>gosubset_prok</subset>\n</term>\n"
            "<term>\n<id>GO:0000006</id>\n<subset>gosubset_prok</subset>\n</term>\n"
            "<term>\n<id>GO:0000007</id>\n<subset>gosubset_prok</subset>\n</term>\n"
        )
    (data_dir / "a.auprc.txt").write_text("5\t0.8\t3\n6\t0.4\t1\n7\t0.3\t0\n")
    (data_dir / "b.auprc.txt").write_text("5\t0.6\t2\n6\t0.5\t0\n7\t0.2\t0\n")
    (data_dir / "freq.txt").write_text("5\t0.001\n6\t0.5\n7\t0.01\n")


CONFIG = """
data_dir: {data_dir}
output_dir: {output_dir}
scenarios:
  - kind: function_complementarity
    name: fig1
    first:
      name: MPP-H
      predictions: first.pr.txt
    second:
      name: PP
      predictions: second.pr.txt
    known_labels: known.txt
    ontology: go.obo-xml.gz
    thresholds: [0.5, 0.8]
    family_breakdown:
      colors: [yellow, blue]
  - kind: family_complementarity
    name: fig2
    first:
      name: MPP-I
      predictions: first.pr.txt
    second:
      name: PP
      predictions: second.pr.txt
    known_labels: known.txt
    label_allowlist: allow.txt
    thresholds: [0.5]
  - kind: multi_method
    name: fig3
    methods:
      - name: A
        predictions: first.pr.txt
      - name: B
        predictions: second.pr.txt
    known_labels: known.txt
    thresholds: [0.5]
  - kind: coevolution_network
    name: network_table
    first:
      name: MPP
      profiles: mpp.csv
    second:
      name: PP
      profiles: pp.csv
    known_labels: network_known.txt
    first_label: 9401
    second_label: 6094
    threshold: 0.5
    correlations: correlations.txt
  - kind: coevolution_network
    name: network_profiles
    first:
      name: MPP
      profiles: mpp.csv
    second:
      name: PP
      profiles: pp.csv
    known_labels: network_known.txt
    first_label: 9401
    second_label: 6094
    threshold: 0.5
    feature_selection: false
  - kind: auprc_distribution
    name: auprc
    classifiers:
      - name: A
        statistics: a.auprc.txt
        color: red
      - name: B
        statistics: b.auprc.txt
        color: blue
    ontology: go.obo-xml.gz
    label_frequencies: freq.txt
  - kind: multi_method
    name: broken
    methods:
      - name: A
        predictions: missing.pr.txt
    known_labels: known.txt
    thresholds: [0.5, 0.7]
"""


@pytest.fixture
def config_path(tmp_path):
    """Config YAML over the synthetic data set; outputs go to tmp_path/out."""
    write_inputs(tmp_path / "data")
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG.format(data_dir=tmp_path / "data", output_dir=tmp_path / "out"))
    return path
