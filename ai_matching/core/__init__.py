"""
Core business logic of the matching engine.

Submodules:
- resume_text: Resume text extraction for prompts
- text_builder: Candidate and job text blocks
- scoring: Config resolution, aggregation and the single-application pipeline
- batch: Background batch scoring and progress polling
"""
