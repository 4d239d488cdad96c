"""
Quiz Generation Pipeline
generation/

Steps:
1. Usage Tracker       — tier lookup + daily quota gate (incremented after success)
2. Syllabus Inference  — topic → curriculum subjects (curated map or LLM)
3. Quiz Generator      — LLM generation of N MCQs locked to those subjects
4. Validator           — forbidden-content regex filter over question text
"""
