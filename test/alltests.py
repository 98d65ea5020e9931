import unittest

import test_fileutil
import test_conversion
import test_specs
import test_frames
import test_frametable
import test_genres
import test_ape
import test_tags

suite = unittest.TestSuite()
suite.addTest(test_fileutil.suite)
suite.addTest(test_conversion.suite)
suite.addTest(test_specs.suite)
suite.addTest(test_frames.suite)
suite.addTest(test_frametable.suite)
suite.addTest(test_genres.suite)
suite.addTest(test_ape.suite)
suite.addTest(test_tags.suite)

if __name__ == "__main__":
    unittest.main(defaultTest="suite")
