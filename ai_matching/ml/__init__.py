"""
Machine learning modules for the matching engine.

Submodules:
- extractors: Resume text extraction (PDF, DOCX, TXT)
- llm: Candidate-job analysis with a generative model
- embeddings: Text embeddings and semantic similarity
"""
