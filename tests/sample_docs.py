"""Sample org documents shared by the test modules."""

BOOK_DOC = """\
#+TITLE: Dune
#+TYPE: book
#+STATUS: read
#+DATE: 2021-03-04
#+RATING: 5
#+FILETAGS: :book:scifi:
#+AUTHOR: [[id:herbert][Frank Herbert]]

* Notes
Some body text with #+NOT_A_HEADER: ignored
"""

SECOND_BOOK_DOC = """\
#+title: Neuromancer
#+type: book
#+status: reading
#+date: 2023-07-01
#+rating: 4
#+filetags: :book:cyberpunk:
"""

UNDATED_BOOK_DOC = """\
#+TITLE: Untitled Draft
#+TYPE: book
#+STATUS: read
#+RATING: 2
"""

ARTICLE_DOC = """\
#+TITLE: On Indexing
#+TYPE: article
#+STATUS: read
#+DATE: 2022-01-15
#+FILETAGS: :reference:
"""

NO_HEADER_DOC = """\
* Just a heading

No frontmatter here.
"""
