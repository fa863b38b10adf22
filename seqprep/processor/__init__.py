# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Preprocessors that write model inputs.

TextPreprocessor picks its encoding from the buffers it manages:
  - one string buffer: the text goes in unchanged
  - one int32 buffer with a regex tokenizer attached: regex encoding
  - three buffers: Bert encoding (ids, mask, segment_ids)
"""
