from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from aligner.formats import FormatTag, matches_format
from aligner.params import (
    DBSNP,
    FORWARD,
    GENOME,
    Encoding,
    ParameterSlot,
    ParameterStore,
    parse_encoding,
)
from aligner.properties import JsonPropertiesStore, MemoryStore


class FormatTests(unittest.TestCase):
    def test_compressed_and_case_insensitive_suffixes(self):
        self.assertTrue(matches_format("sample_R1.fastq.gz", FormatTag.FASTQ))
        self.assertTrue(matches_format("/data/READS.FQ", FormatTag.FASTQ))
        self.assertTrue(matches_format("known.vcf.gz", FormatTag.VCF))
        self.assertFalse(matches_format("genome.fa", FormatTag.FASTQ))
        self.assertFalse(matches_format(".bam", FormatTag.BAM))


class ParameterSlotTests(unittest.TestCase):
    def test_set_rejects_wrong_format_and_keeps_value(self):
        slot = ParameterSlot(GENOME, "Genome (GRCh37)", (FormatTag.FASTA,))
        slot.set("/ref/hg19.fa")
        with self.assertRaises(ValueError):
            slot.set("/ref/hg19.vcf")
        self.assertEqual(slot.value, Path("/ref/hg19.fa"))

    def test_listeners_see_changes_until_unsubscribed(self):
        slot = ParameterSlot(FORWARD, "Forward sequences", (FormatTag.FASTQ,))
        events = []
        unsubscribe = slot.subscribe(lambda s, old, new: events.append((old, new)))

        slot.set("/reads/a_R1.fastq")
        slot.set("/reads/a_R1.fastq")
        slot.set(None)
        unsubscribe()
        slot.set("/reads/b_R1.fastq")

        self.assertEqual(
            events,
            [(None, Path("/reads/a_R1.fastq")), (Path("/reads/a_R1.fastq"), None)],
        )

    def test_parse_encoding(self):
        self.assertIs(parse_encoding("phred33"), Encoding.PHRED33)
        self.assertIs(parse_encoding("PHRED+64"), Encoding.PHRED64)
        self.assertIsNone(parse_encoding(None))
        self.assertIsNone(parse_encoding(""))
        with self.assertRaises(ValueError):
            parse_encoding("solexa")


class PersistedDefaultTests(unittest.TestCase):
    def test_setting_slot_writes_store_and_fresh_store_reproduces_it(self):
        store = MemoryStore()
        params = ParameterStore.create(store)
        params.set(GENOME, "/ref/hg19.fasta")
        params.set(DBSNP, "/ref/dbsnp_138.vcf")

        self.assertEqual(store.get("reference.genome"), "/ref/hg19.fasta")
        self.assertEqual(store.get("dbSNP"), "/ref/dbsnp_138.vcf")

        fresh = ParameterStore.create(store)
        self.assertEqual(fresh.get(GENOME), Path("/ref/hg19.fasta"))
        self.assertEqual(fresh.get(DBSNP), Path("/ref/dbsnp_138.vcf"))

    def test_unkeyed_slots_and_cleared_values_are_not_persisted(self):
        store = MemoryStore({"mills": "/ref/mills.vcf.gz"})
        params = ParameterStore.create(store)
        params.set(FORWARD, "/reads/a_R1.fq")
        params.set("mills", None)

        self.assertEqual(store.as_dict(), {"mills": "/ref/mills.vcf.gz"})

    def test_persisted_value_of_wrong_format_is_ignored(self):
        store = MemoryStore({"phase1": "/ref/phase1.txt"})
        with self.assertLogs("aligner.params", level="WARNING"):
            params = ParameterStore.create(store)
        self.assertIsNone(params.get("phase1"))

    def test_json_store_round_trip_across_instances(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "aligner.json"
            params = ParameterStore.create(JsonPropertiesStore(path))
            params.set(GENOME, "/ref/hg19.fa")

            self.assertEqual(json.loads(path.read_text(encoding="utf-8")), {"reference.genome": "/ref/hg19.fa"})
            reopened = ParameterStore.create(JsonPropertiesStore(path))
            self.assertEqual(reopened.get(GENOME), Path("/ref/hg19.fa"))

    def test_json_store_rejects_non_object(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "aligner.json"
            path.write_text("[1, 2]", encoding="utf-8")
            with self.assertRaises(ValueError):
                JsonPropertiesStore(path)

    def test_unknown_role(self):
        params = ParameterStore.create()
        with self.assertRaises(ValueError):
            params.set("tumour", "/reads/x.fq")


if __name__ == "__main__":
    unittest.main()
