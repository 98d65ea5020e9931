# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

import io
import unittest
import warnings

from builders import ape_header, ape_item, ape_tag, audio, tag, text_frame

from mp3tagdata.errors import *
from mp3tagdata.ape import *

class FindSignatureTestCase(unittest.TestCase):
    def testAtEnd(self):
        data = audio(100) + SIGNATURE
        self.assertEqual(find_signature(io.BytesIO(data)), 100)

    def testNotFound(self):
        self.assertIsNone(find_signature(io.BytesIO(audio(10000))))
        self.assertIsNone(find_signature(io.BytesIO(b"")))
        self.assertIsNone(find_signature(io.BytesIO(SIGNATURE[:7])))

    def testStraddlingWindowBoundary(self):
        # Ends one byte before the start of the last window
        data = bytes(100)
        data = data[:100 - 16 - 1] + SIGNATURE + data[100 - 16 - 1 + 8:]
        self.assertEqual(len(data), 100)
        self.assertEqual(find_signature(io.BytesIO(data), chunk_size=16), 83)

    def testEveryOffsetAndChunkSize(self):
        for chunk_size in (8, 9, 15, 16, 17, 31, 64):
            for pos in range(0, 64 - len(SIGNATURE) + 1):
                data = bytearray(64)
                data[pos:pos + len(SIGNATURE)] = SIGNATURE
                found = find_signature(io.BytesIO(bytes(data)), chunk_size=chunk_size)
                self.assertEqual(found, pos, "chunk_size={0} pos={1}".format(chunk_size, pos))

    def testNearestWindowWins(self):
        data = SIGNATURE + bytes(100) + SIGNATURE + bytes(10)
        self.assertEqual(find_signature(io.BytesIO(data), chunk_size=32), 108)
        # Within a single window the first match is returned
        self.assertEqual(find_signature(io.BytesIO(data), chunk_size=4096), 0)

    def testLimit(self):
        data = SIGNATURE + bytes(1000)
        self.assertIsNone(find_signature(io.BytesIO(data), limit=500))
        self.assertEqual(find_signature(io.BytesIO(data), limit=1008), 0)


class ApeTagTestCase(unittest.TestCase):
    items = [("Title", b"Song"), ("Artist", b"Someone"), ("Year", b"1999")]

    def prefix(self):
        return tag(text_frame("TIT2", "x")) + audio(5000)

    def read(self, data, **kwargs):
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            result = ApeTag.read(io.BytesIO(data), **kwargs)
        return result, w

    def testHeaderAndFooter(self):
        prefix = self.prefix()
        ape, w = self.read(prefix + ape_tag(self.items))
        self.assertEqual(len(w), 0)
        self.assertEqual(ape.offset, len(prefix))
        self.assertTrue(ape.header.is_header)
        self.assertTrue(ape.header.has_header)
        self.assertTrue(ape.header.has_footer)
        self.assertEqual(ape.header.version, 2000)
        self.assertEqual(len(ape), 3)
        self.assertEqual(ape.keys(), ["Title", "Artist", "Year"])
        self.assertEqual(ape["Artist"].text, "Someone")

    def testFooterFoundFirst(self):
        prefix = self.prefix()
        data = prefix + ape_tag(self.items)
        for chunk_size in (16, 32, 40, 100):
            ape, w = self.read(data, chunk_size=chunk_size)
            self.assertEqual(len(w), 0)
            self.assertEqual(ape.offset, len(prefix))
            self.assertEqual(len(ape), 3)

    def testFooterOnly(self):
        prefix = self.prefix()
        ape, w = self.read(prefix + ape_tag(self.items, with_header=False))
        self.assertEqual(len(w), 0)
        self.assertFalse(ape.header.is_header)
        self.assertFalse(ape.header.has_header)
        self.assertEqual(ape.offset, len(prefix))
        self.assertEqual(ape["Year"].text, "1999")

    def testNoTag(self):
        ape, w = self.read(self.prefix())
        self.assertIsNone(ape)
        self.assertEqual(len(w), 0)

    def testTruncatedItems(self):
        body = ape_item("Title", b"x") + ape_item("Artist", b"y")
        size = len(body) + 32
        data = ape_header(size, 3, True) + body + ape_header(size, 3, False)
        ape, w = self.read(data)
        self.assertEqual(len(ape), 2)
        self.assertEqual(len(w), 1)
        self.assertTrue(issubclass(w[0].category, ApeWarning))

    def testShortKeysStopParsing(self):
        for bad in (b"\x00" * 16, ape_item("", b""), ape_item("X", b"y")):
            body = ape_item("Title", b"x") + bad
            size = len(body) + 32
            data = ape_header(size, 2, True) + body + ape_header(size, 2, False)
            ape, w = self.read(data)
            self.assertEqual(ape.keys(), ["Title"])
            self.assertEqual(len(w), 1)
            self.assertTrue(issubclass(w[0].category, ApeWarning))
            self.assertIn("too short", str(w[0].message))

    def testImplausibleSize(self):
        ape, w = self.read(b"xx" + ape_header(1000, 0, False, 0))
        self.assertIsNone(ape)
        self.assertTrue(issubclass(w[0].category, ApeWarning))

    def testTruncatedHeader(self):
        ape, w = self.read(audio(100) + SIGNATURE + bytes(4))
        self.assertIsNone(ape)
        self.assertTrue(issubclass(w[0].category, ApeWarning))

    def testCaseInsensitiveLookup(self):
        ape, w = self.read(ape_tag(self.items))
        self.assertEqual(ape.get("title").text, "Song")
        self.assertEqual(ape["TITLE"].value, b"Song")
        self.assertIn("artist", ape)
        self.assertNotIn("Album", ape)
        self.assertIsNone(ape.get("Album"))
        self.assertRaises(KeyError, ape.__getitem__, "Album")

    def testItemFlags(self):
        body = (ape_item("Cover Art (Front)", b"\x00\x01\xff", flags=1 << 1)
                + ape_item("Title", "Ősz".encode("utf-8"), flags=1))
        size = len(body) + 32
        data = ape_header(size, 2, True) + body + ape_header(size, 2, False)
        ape, w = self.read(data)
        cover, title = list(ape)
        self.assertTrue(cover.is_binary)
        self.assertFalse(cover.is_text)
        self.assertFalse(cover.is_read_only)
        self.assertTrue(title.is_text)
        self.assertTrue(title.is_read_only)
        self.assertEqual(title.text, "Ősz")

suite = unittest.TestSuite([
        unittest.TestLoader().loadTestsFromTestCase(FindSignatureTestCase),
        unittest.TestLoader().loadTestsFromTestCase(ApeTagTestCase),
        ])

if __name__ == "__main__":
    unittest.main(defaultTest="suite")
